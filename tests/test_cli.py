import json

import pytest

from acidbase.cli import build_parser, build_inputs, main


def test_headless_defaults(capsys):
    main(["--mode", "headless", "--defaults"])
    out = capsys.readouterr().out
    assert "SIDa: 42.4 mEq/L" in out
    assert "SIG: 5.5 mEq/L" in out
    assert "Unknown anions: 5.5 mEq/L" in out
    assert "Cations:" in out and "Anions:" in out


def test_headless_json(capsys):
    main(["--mode", "headless", "--defaults", "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["results"]["sida"] == pytest.approx(42.4)
    assert payload["results"]["hco3_source"] == "blood_gas"
    anions = payload["gamblegram"]["anions"]
    assert anions[0]["key"] == "Cl"
    assert anions[-1]["key"] == "Unknown"
    assert anions[-1]["value"] == 5.5


def test_conventional_units_converted():
    args = build_parser().parse_args(["--defaults", "--mg", "2.43", "--mg-unit", "mg/dL"])
    inputs = build_inputs(args)
    assert inputs.mg == pytest.approx(1.0, abs=1e-3)
    assert inputs.na == 140.0


def test_blank_without_defaults():
    inputs = build_inputs(build_parser().parse_args(["--na", "140"]))
    assert inputs.na == 140.0
    assert inputs.cl is None


def test_measured_bicarbonate_flag(capsys):
    main(["--mode", "headless", "--defaults", "--hco3", "30", "--use-measured-hco3", "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["results"]["effective_hco3"] == 30.0
    assert payload["results"]["hco3_source"] == "measured"


def test_invalid_unit_exits(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--mode", "headless", "--mg", "2", "--mg-unit", "furlongs"])
    assert exc.value.code == 1
    assert "Unsupported concentration unit" in capsys.readouterr().err


def test_show_non_si(capsys):
    main(["--mode", "headless", "--defaults", "--show-non-si"])
    out = capsys.readouterr().out
    assert "mg/dL" in out
