import json
from pathlib import Path

from pointwindow.cli import main
from pointwindow.errors import ExitCode

TODAY = "2026-01-30"


def _run(capsys, *argv: str):
    code = main(list(argv))
    out = capsys.readouterr().out
    return code, out


def test_set_day_then_history(tmp_path: Path, capsys):
    state = str(tmp_path / "state.json")
    code, _ = _run(capsys, "set-day", "--state", state, "--today", TODAY,
                   "--date", "2026-01-29", "--field", "claim", "--value", "1")
    assert code == 0

    code, out = _run(capsys, "history", "--state", state, "--today", TODAY, "--format", "json")
    assert code == 0
    obj = json.loads(out)
    assert obj["current_window"] == 240
    assert len(obj["rows"]) == 15
    assert obj["rows"][-1]["accounted_score"] == 2

    saved = json.loads(Path(state).read_text(encoding="utf-8"))
    assert saved["score_data"] == {"2026-01-29": {"claim": 1}}
    assert saved["fingerprint"]


def test_malformed_value_is_saved_as_zero(tmp_path: Path, capsys):
    state = str(tmp_path / "state.json")
    code, out = _run(capsys, "set-day", "--state", state, "--today", TODAY,
                     "--date", TODAY, "--field", "raw", "--value", "abc", "--format", "json")
    assert code == 0
    assert json.loads(out)["record"] == {"raw": 0}


def test_predict_already_satisfied(tmp_path: Path, capsys):
    state = str(tmp_path / "state.json")
    code, out = _run(capsys, "predict", "--state", state, "--today", TODAY, "--format", "json")
    assert code == 0
    obj = json.loads(out)
    assert obj["status"] == "ALREADY_SATISFIED"
    assert obj["current_window"] == 255


def test_predict_unreachable_with_config(tmp_path: Path, capsys):
    cfg = tmp_path / "rules.yaml"
    cfg.write_text("daily_score: 10\nmax_days: 100\n", encoding="utf-8")
    state = str(tmp_path / "state.json")
    code, out = _run(capsys, "predict", "--state", state, "--config", str(cfg),
                     "--today", TODAY, "--threshold", "500")
    assert code == 0
    assert "not reachable within 100 days" in out


def test_configure_and_forward(tmp_path: Path, capsys):
    state = str(tmp_path / "state.json")
    code, _ = _run(capsys, "configure", "--state", state, "--today", TODAY, "--daily-score", "20")
    assert code == 0
    code, out = _run(capsys, "forward", "--state", state, "--today", TODAY, "--days", "3", "--format", "json")
    rows = json.loads(out)["rows"]
    assert [r["trailing_window_sum"] for r in rows] == [300, 300, 300]


def test_advise_and_summary(tmp_path: Path, capsys):
    state = str(tmp_path / "state.json")
    code, out = _run(capsys, "advise", "--state", state, "--today", TODAY, "--format", "json")
    assert code == 0
    assert json.loads(out)["eligible"] is True
    code, out = _run(capsys, "summary", "--state", state, "--today", TODAY)
    assert code == 0
    assert "total=255" in out


def test_broken_state_file(tmp_path: Path, capsys):
    state = tmp_path / "state.json"
    state.write_text("{not json", encoding="utf-8")
    code, out = _run(capsys, "history", "--state", str(state), "--today", TODAY, "--format", "json")
    assert code == int(ExitCode.STATE_INVALID)
    assert json.loads(out)["error"]["code"] == "PW_STATE_PARSE_ERROR"


def test_state_with_bad_date_key(tmp_path: Path, capsys):
    state = tmp_path / "state.json"
    state.write_text(json.dumps({"score_data": {"bad": {"raw": 5}}}), encoding="utf-8")
    code, out = _run(capsys, "history", "--state", str(state), "--today", TODAY, "--format", "json")
    assert code == int(ExitCode.STATE_INVALID)
    assert json.loads(out)["error"]["code"] == "PW_STATE_PARSE_ERROR"


def test_explicit_zero_horizons_are_not_replaced_by_defaults(tmp_path: Path, capsys):
    state = str(tmp_path / "state.json")
    code, out = _run(capsys, "predict", "--state", state, "--today", TODAY,
                     "--max-days", "0", "--format", "json")
    assert code == 0
    assert json.loads(out)["status"] == "INVALID_INPUT"

    code, out = _run(capsys, "forward", "--state", state, "--today", TODAY,
                     "--days", "0", "--format", "json")
    assert code == 0
    assert json.loads(out)["rows"] == []


def test_missing_config(tmp_path: Path, capsys):
    code, _ = _run(capsys, "history", "--state", str(tmp_path / "s.json"),
                   "--config", str(tmp_path / "nope.yaml"), "--today", TODAY)
    assert code == int(ExitCode.CONFIG_INVALID)


def test_demo(capsys):
    code, out = _run(capsys, "demo", "--today", TODAY, "--format", "json")
    assert code == 0
    obj = json.loads(out)
    assert obj["current_window"] == 255 - 7 * 15
    assert obj["search"]["status"] == "FOUND"
