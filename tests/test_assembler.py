"""Quote assembler — line expansion, aggregation, integrity."""

from __future__ import annotations

import pytest

from cpq_engine.config import (
    CeilingArea,
    DisciplineOverride,
    NegotiatedRate,
    QuoteInput,
    StandardArea,
    WalkthroughArea,
)
from cpq_engine.config.codes import Discipline, Lod, PaymentTerm, Scope
from cpq_engine.engine.assembler import (
    apply_payment_term_premium,
    assemble_quote,
    evaluate_integrity,
    is_tier_a,
    total_project_sqft,
)
from cpq_engine.models.results import IntegrityStatus, LineCategory


def _codes(quote):
    return [f.code for f in quote.integrity_flags]


# ═══════════════════════════════════════════════════════════════════════════
# Single-area quotes
# ═══════════════════════════════════════════════════════════════════════════

class TestOfficeQuote:
    """5,000 sqft arch LOD 300, 30 miles standard travel, owner terms."""

    def test_line_items(self, rates, office_quote):
        q = assemble_quote(office_quote, rates)
        assert [li.id for li in q.line_items] == ["li-1", "li-2"]
        arch, travel = q.line_items
        assert arch.category is LineCategory.MODELING
        assert arch.discipline is Discipline.ARCH
        assert arch.client_price == 1625.0
        assert arch.cost_basis == 1056.25
        assert arch.size_band == "5k-10k"
        assert travel.category is LineCategory.TRAVEL
        assert travel.area_id == "travel"
        assert travel.client_price == travel.cost_basis == 90.0

    def test_totals(self, rates, office_quote):
        q = assemble_quote(office_quote, rates)
        assert abs(q.total_client_price - 1715.0) < 0.01
        assert abs(q.total_cost_basis - 1146.25) < 0.01
        assert abs(q.gross_margin - 568.75) < 0.01
        assert abs(q.gross_margin_pct - 33.16) < 0.01
        assert q.grand_total == q.total_client_price
        assert q.subtotals.modeling == 1625.0
        assert q.subtotals.travel == 90.0
        assert q.subtotals.total == q.total_client_price

    def test_fallback_ratio_alone_is_blocked(self, rates, office_quote):
        """Rate-card prices at a 0.65 cost ratio sit at 35%, under the floor."""
        q = assemble_quote(office_quote, rates)
        assert q.integrity_status is IntegrityStatus.BLOCKED
        assert "MARGIN_FLOOR" in _codes(q)
        assert not q.can_save

    def test_payment_term_premium(self, rates, office_quote):
        qi = office_quote.model_copy(update={"payment_term": PaymentTerm.NET30})
        q = assemble_quote(qi, rates)
        assert abs(q.payment_term_premium - 85.75) < 0.01
        assert abs(q.grand_total - 1800.75) < 0.01

    def test_margin_excludes_payment_term(self, rates, office_quote):
        owner = assemble_quote(office_quote, rates)
        net90 = assemble_quote(office_quote.model_copy(update={"payment_term": PaymentTerm.NET90}), rates)
        assert net90.gross_margin_pct == owner.gross_margin_pct

    def test_no_travel_line_when_zero(self, rates, office):
        q = assemble_quote(QuoteInput(areas=[office], distance_miles=0), rates)
        assert all(li.category is not LineCategory.TRAVEL for li in q.line_items)
        assert q.travel.total_cost == 0

    def test_flat_travel_override_shows_margin(self, rates, office):
        q = assemble_quote(QuoteInput(areas=[office], distance_miles=30, travel_cost_override=200), rates)
        travel = q.line_items[-1]
        assert travel.client_price == 200.0
        assert travel.cost_basis == 90.0

    def test_zero_flat_travel_override_keeps_cost(self, rates, office):
        q = assemble_quote(QuoteInput(areas=[office], distance_miles=30, travel_cost_override=0), rates)
        travel = q.line_items[-1]
        assert travel.category is LineCategory.TRAVEL
        assert travel.client_price == 0
        assert travel.cost_basis == 90.0
        assert abs(q.total_cost_basis - 1146.25) < 0.01
        assert abs(q.gross_margin_pct - 29.46) < 0.01
        assert "NEGATIVE_MARGIN_ITEMS" in _codes(q)


# ═══════════════════════════════════════════════════════════════════════════
# Area expansion
# ═══════════════════════════════════════════════════════════════════════════

class TestExpansion:

    def test_lines_grouped_by_area(self, rates, office, lawn):
        q = assemble_quote(QuoteInput(areas=[office, lawn], distance_miles=30), rates)
        assert [li.id for li in q.lines_for_area("office")] == ["li-1"]
        assert [li.id for li in q.lines_for_area("lawn")] == ["li-2"]
        assert [li.category for li in q.lines_for_area("travel")] == [LineCategory.TRAVEL]
        assert q.lines_for_area("missing") == []

    def test_one_line_per_discipline(self, rates):
        area = StandardArea(id="a", square_feet=10_000, disciplines=["arch", "mepf", "structure", "site"])
        q = assemble_quote(QuoteInput(areas=[area]), rates)
        assert [li.discipline for li in q.line_items] == [
            Discipline.ARCH, Discipline.MEPF, Discipline.STRUCTURE, Discipline.SITE,
        ]

    def test_mixed_scope_splits_lines(self, rates):
        area = StandardArea(
            id="a", square_feet=10_000, disciplines=["arch"], scope="mixed",
            mixed_interior_lod="350", mixed_exterior_lod="200",
        )
        q = assemble_quote(QuoteInput(areas=[area]), rates)
        interior, exterior = q.line_items
        assert interior.scope is Scope.INTERIOR and interior.lod is Lod.LOD_350
        assert exterior.scope is Scope.EXTERIOR and exterior.lod is Lod.LOD_200
        assert interior.client_price == pytest.approx(2437.5)
        assert exterior.client_price == pytest.approx(875.0)

    def test_mixed_scope_without_overrides_uses_area_lod(self, rates):
        area = StandardArea(id="a", square_feet=10_000, disciplines=["arch"], scope="mixed")
        q = assemble_quote(QuoteInput(areas=[area]), rates)
        assert sum(li.client_price for li in q.line_items) == pytest.approx(3250.0)

    def test_discipline_override(self, rates):
        area = StandardArea(
            id="a", square_feet=10_000, disciplines=["arch", "mepf"], lod="300",
            discipline_overrides={"mepf": DisciplineOverride(lod="200", scope="interior")},
        )
        q = assemble_quote(QuoteInput(areas=[area]), rates)
        arch, mepf = q.line_items
        assert arch.client_price == pytest.approx(3250.0)
        assert mepf.lod is Lod.LOD_200
        assert mepf.scope is Scope.INTERIOR
        assert mepf.client_price == pytest.approx(10_000 * 0.30 * 1.0 * 0.65)

    def test_negotiated_rate_line(self, rates):
        area = StandardArea(
            id="a", square_feet=2_000, disciplines=["arch"],
            negotiated_rates={"arch": NegotiatedRate(client_rate=3.0, cost_rate=1.8)},
        )
        li = assemble_quote(QuoteInput(areas=[area]), rates).line_items[0]
        assert li.effective_sqft == 3_000
        assert li.client_price == 9000.0
        assert li.cost_basis == 5400.0

    def test_elevation_line(self, rates):
        area = StandardArea(id="a", square_feet=5_000, disciplines=["arch"], additional_elevations=15)
        q = assemble_quote(QuoteInput(areas=[area]), rates)
        elev = q.line_items[-1]
        assert elev.category is LineCategory.ELEVATION
        assert elev.client_price == 350.0
        assert elev.cost_basis == 227.5
        assert q.subtotals.elevations == 350.0

    def test_walkthrough_add_on(self, rates):
        area = StandardArea(id="a", square_feet=5_000, disciplines=["arch"], include_walkthrough=True)
        q = assemble_quote(QuoteInput(areas=[area]), rates)
        service = q.line_items[-1]
        assert service.category is LineCategory.SERVICE
        assert service.client_price == 50.0
        assert q.subtotals.services == 50.0

    def test_specialty_areas(self, rates, lawn, ceilings):
        walk = WalkthroughArea(id="w", square_feet=2_000)
        q = assemble_quote(QuoteInput(areas=[lawn, ceilings, walk]), rates)
        prices = [li.client_price for li in q.line_items]
        assert prices == [1875.0, 1000.0, 30.0]
        assert q.line_items[0].category is LineCategory.MODELING
        assert q.line_items[1].category is LineCategory.SERVICE

    def test_unknown_discipline_line_at_zero(self, rates):
        area = StandardArea(id="a", square_feet=5_000, disciplines=["arch", "drone"])
        q = assemble_quote(QuoteInput(areas=[area]), rates)
        assert q.line_items[1].discipline is Discipline.UNKNOWN
        assert q.line_items[1].client_price == 0


# ═══════════════════════════════════════════════════════════════════════════
# Risk
# ═══════════════════════════════════════════════════════════════════════════

class TestRiskInQuote:

    def test_area_risk_on_arch_only(self, rates):
        area = StandardArea(id="a", square_feet=5_000, disciplines=["arch", "mepf"], risks=["occupied"])
        arch, mepf = assemble_quote(QuoteInput(areas=[area]), rates).line_items
        assert arch.client_price == pytest.approx(1868.75)
        assert arch.cost_basis == pytest.approx(1056.25)
        assert arch.risk_multiplier == pytest.approx(1.15)
        assert mepf.client_price == pytest.approx(1950.0)
        assert mepf.risk_multiplier == 1.0

    def test_project_and_area_risks_union(self, rates):
        area = StandardArea(id="a", square_feet=5_000, disciplines=["arch"], risks=["occupied"])
        qi = QuoteInput(areas=[area], risks=["hazardous", "occupied"])
        arch = assemble_quote(qi, rates).line_items[0]
        assert arch.risk_multiplier == pytest.approx(1.40)
        assert arch.client_price == pytest.approx(2275.0)


# ═══════════════════════════════════════════════════════════════════════════
# Aggregation helpers and integrity
# ═══════════════════════════════════════════════════════════════════════════

class TestIntegrity:

    @pytest.mark.parametrize("pct,status", [
        (0.0, IntegrityStatus.BLOCKED),
        (39.99, IntegrityStatus.BLOCKED),
        (40.0, IntegrityStatus.WARNING),
        (44.99, IntegrityStatus.WARNING),
        (45.0, IntegrityStatus.PASSED),
        (70.0, IntegrityStatus.PASSED),
    ])
    def test_thresholds(self, rates, pct, status):
        got, _ = evaluate_integrity(pct, [], False, rates)
        assert got is status

    def test_empty_quote(self, rates):
        q = assemble_quote(QuoteInput(), rates)
        assert q.line_items == []
        assert q.gross_margin_pct == 0
        assert q.integrity_status is IntegrityStatus.BLOCKED

    def test_negative_margin_items_flagged(self, rates):
        area = StandardArea(
            id="a", square_feet=5_000, disciplines=["arch", "mepf"],
            negotiated_rates={"arch": NegotiatedRate(client_rate=1.0, cost_rate=2.0)},
        )
        q = assemble_quote(QuoteInput(areas=[area]), rates)
        assert q.line_items[0].has_negative_margin
        assert "NEGATIVE_MARGIN_ITEMS" in _codes(q)

    def test_tier_a_flag(self, rates):
        area = StandardArea(id="a", square_feet=50_000, disciplines=["arch"])
        q = assemble_quote(QuoteInput(areas=[area]), rates)
        assert q.is_tier_a
        assert "TIER_A_REVIEW" in _codes(q)

    def test_tier_a_boundary(self, rates):
        assert not is_tier_a(49_999, rates)
        assert is_tier_a(50_000, rates)

    def test_landscape_acres_count_toward_footprint(self, rates, lawn, office):
        assert total_project_sqft([lawn, office], rates) == pytest.approx(3 * 43_560 + 5_000)
        assert assemble_quote(QuoteInput(areas=[lawn]), rates).is_tier_a

    def test_ceiling_counts_toward_footprint(self, rates):
        assert total_project_sqft([CeilingArea(id="c", square_feet=7_000)], rates) == 7_000

    def test_payment_term_helper(self, rates):
        assert apply_payment_term_premium(10_000, PaymentTerm.NET30, rates) == pytest.approx(10_500)
        assert apply_payment_term_premium(10_000, PaymentTerm.UNKNOWN, rates) == 10_000
