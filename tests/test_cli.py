"""Command line — exit codes, rate overrides, output destinations."""

from __future__ import annotations

import json
import logging

import pytest

from cpq_engine.cli import EXIT_BLOCKED, EXIT_ERROR, EXIT_OK, main


@pytest.fixture(autouse=True)
def _isolated_cli(monkeypatch):
    monkeypatch.delenv("CPQ_RATES_PATH", raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def _write_quote(tmp_path, body: str):
    path = tmp_path / "quote.yaml"
    path.write_text(body)
    return path


OFFICE = """\
distance_miles: 30
areas:
  - id: office
    building_type: "1"
    square_feet: 5000
    disciplines: [arch]
"""


def test_sample_quote_passes(sample_quote_path, tmp_path):
    out = tmp_path / "quote.json"
    assert main([str(sample_quote_path), "--output", str(out)]) == EXIT_OK
    data = json.loads(out.read_text())
    assert data["applied_target_margin_pct"] == 45
    assert data["integrity_status"] in ("passed", "warning")
    assert data["is_tier_a"] is True


def test_rate_card_prices_are_blocked(tmp_path, capsys):
    assert main([str(_write_quote(tmp_path, OFFICE))]) == EXIT_BLOCKED
    captured = capsys.readouterr()
    assert json.loads(captured.out)["integrity_status"] == "blocked"
    assert "blocked" in captured.err


def test_target_flag(tmp_path, capsys):
    assert main([str(_write_quote(tmp_path, OFFICE)), "--target", "55"]) == EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert data["applied_target_margin_pct"] == 55


def test_set_override(tmp_path, capsys):
    code = main([str(_write_quote(tmp_path, OFFICE)), "--set", "margins.floor_pct=30",
                 "--set", "margins.slider_min_pct=30"])
    assert code == EXIT_OK
    assert "warning" in capsys.readouterr().out


def test_rates_from_environment(tmp_path, capsys, monkeypatch):
    rates = tmp_path / "rates.yaml"
    rates.write_text("version: FY27\n")
    monkeypatch.setenv("CPQ_RATES_PATH", str(rates))
    main([str(_write_quote(tmp_path, OFFICE))])
    assert json.loads(capsys.readouterr().out)["rates_version"] == "FY27"


def test_missing_quote_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.yaml")]) == EXIT_ERROR
    assert "error:" in capsys.readouterr().err


def test_bad_rate_override(tmp_path, capsys):
    assert main([str(_write_quote(tmp_path, OFFICE)), "--set", "margins.floor_pct"]) == EXIT_ERROR
    assert "--set" in capsys.readouterr().err


def test_target_flag_without_value_uses_rate_card_default(tmp_path, capsys):
    assert main([str(_write_quote(tmp_path, OFFICE)), "--target"]) == EXIT_OK
    assert json.loads(capsys.readouterr().out)["applied_target_margin_pct"] == 45


def test_unwritable_output(tmp_path, capsys):
    out = tmp_path / "missing" / "quote.json"
    code = main([str(_write_quote(tmp_path, OFFICE)), "--target", "45", "--output", str(out)])
    assert code == EXIT_ERROR
    assert "error: cannot write" in capsys.readouterr().err
    assert not out.exists()


def test_json_logs_carry_quote_context(tmp_path, capsys):
    quote = _write_quote(tmp_path, OFFICE)
    main([str(quote), "--target", "45", "--json-logs", "--log-level", "INFO"])
    lines = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.startswith("{")]
    priced = [e for e in lines if e["msg"].startswith("Priced")]
    assert priced
    assert priced[0]["quote_file"] == str(quote)
    assert priced[0]["rates_version"]
