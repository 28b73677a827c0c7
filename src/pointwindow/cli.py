# src/pointwindow/cli.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from .calculator import RollingCalculator
from .config import RulesConfig, load_rules_config, resolve_daily_score, resolve_threshold
from .dates import add_days, to_date_key, today_key
from .errors import ExitCode, PointWindowException, PointWindowProblem, problem_to_dict
from .ledger import FIELDS
from .state import CalculatorState
from .types import SearchResult, SearchStatus

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers: state/config IO + formatting
# =============================================================================

def _print_payload(payload: Dict[str, Any], fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True, default=str))
    elif fmt == "jsonl":
        print(json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str))
    else:
        # "text": caller prints human-friendly output
        pass


def _write_text(path: str | Path, text: str) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")


def _load_config(path: Optional[str]) -> RulesConfig:
    if not path:
        return RulesConfig()
    if not Path(path).exists():
        raise PointWindowException(
            PointWindowProblem(
                code="PW_CONFIG_NOT_FOUND",
                category="config",
                message=f"Config not found: {path}",
                details={"path": path},
                remediation="Verify the path is correct and the file exists.",
            ),
            ExitCode.CONFIG_INVALID,
        )
    try:
        return load_rules_config(path)
    except Exception as e:
        raise PointWindowException(
            PointWindowProblem(
                code="PW_CONFIG_PARSE_ERROR",
                category="config",
                message=f"Failed to parse rules config: {path}",
                details={"path": path, "error": repr(e)},
                remediation="Ensure the file is a YAML or JSON mapping encoded in UTF-8.",
            ),
            ExitCode.CONFIG_INVALID,
            cause=e,
        )


def _load_calculator(args: argparse.Namespace, cfg: RulesConfig) -> RollingCalculator:
    """Missing state file -> fresh profile seeded from the config defaults."""
    p = Path(args.state)
    if not p.exists():
        logger.debug("state %s not found, starting a fresh profile", p)
        return RollingCalculator(
            daily_score=cfg.daily_score,
            expected_score=cfg.expected_score,
            rules=cfg.rules,
            name=args.profile,
        )
    try:
        state = CalculatorState.from_json(p.read_text(encoding="utf-8"))
        return RollingCalculator.from_state(state, rules=cfg.rules)
    except Exception as e:
        raise PointWindowException(
            PointWindowProblem(
                code="PW_STATE_PARSE_ERROR",
                category="state",
                message=f"Failed to parse state file: {args.state}",
                details={"path": args.state, "error": repr(e)},
                remediation="Fix or remove the state file; a missing file starts a fresh profile.",
            ),
            ExitCode.STATE_INVALID,
            cause=e,
        )


def _save_calculator(args: argparse.Namespace, calc: RollingCalculator) -> None:
    _write_text(args.state, calc.to_state().to_json())
    logger.debug("saved state to %s", args.state)


def _open(args: argparse.Namespace):
    cfg = _load_config(args.config)
    calc = _load_calculator(args, cfg)
    today = to_date_key(args.today) if args.today else today_key()
    if calc.refresh(today):
        _save_calculator(args, calc)
    return cfg, calc, today


def _fmt_num(x: Any) -> str:
    return f"{x:g}" if isinstance(x, (int, float)) else str(x)


def _print_rows(rows: List[Any], columns: List[str]) -> None:
    print("  ".join(f"{c:>12}" for c in columns))
    for r in rows:
        d = asdict(r)
        print("  ".join(f"{_fmt_num(d[c]):>12}" for c in columns))


def _search_to_dict(res: SearchResult) -> Dict[str, Any]:
    return {
        "status": res.status.value,
        "threshold": res.threshold,
        "current_window": res.current_window,
        "days_scanned": res.days_scanned,
        "advice": res.advice,
        "hits": [dict(asdict(h), surplus=res.surplus(h)) for h in res.hits],
    }


# =============================================================================
# Commands
# =============================================================================

def cmd_set_day(args: argparse.Namespace) -> int:
    _, calc, _ = _open(args)
    rec = calc.set_day(args.date, args.field, args.value)
    _save_calculator(args, calc)
    if args.format in ("json", "jsonl"):
        _print_payload({"ok": True, "date": to_date_key(args.date), "record": rec.to_dict()}, args.format)
    else:
        print(f"{to_date_key(args.date)}: {rec.to_dict()}")
    return 0


def cmd_configure(args: argparse.Namespace) -> int:
    _, calc, _ = _open(args)
    if args.daily_score is not None:
        calc.daily_score = resolve_daily_score(args.daily_score)
    if args.expected_score is not None:
        calc.expected_score = resolve_threshold(args.expected_score)
    _save_calculator(args, calc)
    out = {"ok": True, "daily_score": calc.daily_score, "expected_score": calc.expected_score}
    if args.format in ("json", "jsonl"):
        _print_payload(out, args.format)
    else:
        print(f"daily_score={_fmt_num(calc.daily_score)} expected_score={_fmt_num(calc.expected_score)}")
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    _, calc, today = _open(args)
    rows = calc.history_table(today)
    window = calc.current_window(today)
    if args.format in ("json", "jsonl"):
        _print_payload({"today": today, "current_window": window, "rows": [asdict(r) for r in rows]}, args.format)
    else:
        _print_rows(rows, ["date", "raw_score", "claim_count", "accounted_score", "trailing_window_sum"])
        print(f"-- {today}: trailing {calc.rules.window_days}-day sum = {_fmt_num(window)}")
    return 0


def cmd_forward(args: argparse.Namespace) -> int:
    cfg, calc, today = _open(args)
    days = cfg.forward_days if args.days is None else args.days
    rows = calc.forward_table(today, days)
    if args.format in ("json", "jsonl"):
        _print_payload({"today": today, "rows": [asdict(r) for r in rows]}, args.format)
    else:
        _print_rows(rows, ["date", "day_offset", "raw_score", "claim_count", "accounted_score", "trailing_window_sum"])
    return 0


def cmd_predict(args: argparse.Namespace) -> int:
    cfg, calc, today = _open(args)
    max_days = cfg.max_days if args.max_days is None else args.max_days
    res = calc.predict(today, threshold=args.threshold, max_days=max_days)
    if args.format in ("json", "jsonl"):
        _print_payload(_search_to_dict(res), args.format)
        return 0

    if res.status == SearchStatus.INVALID_INPUT:
        print(f"Invalid target score: {_fmt_num(res.threshold)}; enter a positive target.")
    elif res.status == SearchStatus.ALREADY_SATISFIED:
        print(f"Target already met: current window {_fmt_num(res.current_window)}")
    elif res.status == SearchStatus.UNREACHABLE:
        print(f"Target {_fmt_num(res.threshold)} not reachable within {res.days_scanned} days.")
        print(res.advice)
    else:
        for h in res.hits:
            print(
                f"{h.date}  +{h.day_offset}d  score={_fmt_num(h.score)}  "
                f"surplus={_fmt_num(res.surplus(h))}  after_first={res.days_after_first(h)}d"
            )
    return 0


def cmd_advise(args: argparse.Namespace) -> int:
    _, calc, today = _open(args)
    a = calc.assess(today)
    if args.format in ("json", "jsonl"):
        _print_payload(asdict(a), args.format)
    else:
        print(f"window={_fmt_num(a.window)} threshold={_fmt_num(a.threshold)} eligible={a.eligible}")
        for s in a.suggestions:
            print(f"- [{s.code}] {s.message}")
    return 0


def cmd_summary(args: argparse.Namespace) -> int:
    _, calc, today = _open(args)
    s = calc.summary(today)
    if args.format in ("json", "jsonl"):
        _print_payload(asdict(s), args.format)
    else:
        print(f"total={_fmt_num(s.total)} average={s.average:.2f} days={s.days}")
    return 0


def cmd_reset(args: argparse.Namespace) -> int:
    _, calc, _ = _open(args)
    calc.reset()
    _save_calculator(args, calc)
    if args.format in ("json", "jsonl"):
        _print_payload({"ok": True}, args.format)
    else:
        print(f"Reset profile {calc.name}")
    return 0


def cmd_demo(args: argparse.Namespace) -> int:
    """
    In-memory walkthrough: one claim per day for the last week, then a search.
    """
    today = to_date_key(args.today) if args.today else today_key()
    calc = RollingCalculator(daily_score=17, expected_score=200, name="demo")
    for i in range(1, 8):
        calc.set_day(add_days(today, -i), "claim", 1)

    res = calc.predict(today)
    out = {
        "today": today,
        "current_window": calc.current_window(today),
        "search": _search_to_dict(res),
    }
    if args.format in ("json", "jsonl"):
        _print_payload(out, args.format)
    else:
        print("\n== History ==")
        _print_rows(calc.history_table(today), ["date", "raw_score", "claim_count", "accounted_score", "trailing_window_sum"])
        print("\n== Prediction ==")
        print(json.dumps(out["search"], indent=2, default=str))
    return 0


# =============================================================================
# Parser / entry point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pointwindow", description="15-day rolling points calculator")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="cmd")

    def add(name: str, func, help_text: str, *, needs_state: bool = True) -> argparse.ArgumentParser:
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--format", choices=["text", "json", "jsonl"], default="text")
        p.add_argument("--today", help="anchor date YYYY-MM-DD (default: today)")
        if needs_state:
            p.add_argument("--state", default="pointwindow_state.json", help="JSON state file")
            p.add_argument("--config", help="YAML/JSON rules file")
            p.add_argument("--profile", default="default", help="profile name for a fresh state")
        p.set_defaults(func=func)
        return p

    p = add("set-day", cmd_set_day, "record a raw score or claim count for a day")
    p.add_argument("--date", required=True)
    p.add_argument("--field", required=True, choices=list(FIELDS))
    p.add_argument("--value", required=True)

    p = add("configure", cmd_configure, "set the default daily score and target")
    p.add_argument("--daily-score")
    p.add_argument("--expected-score")

    add("history", cmd_history, "show the window before today")

    p = add("forward", cmd_forward, "project the next days")
    p.add_argument("--days", type=int)

    p = add("predict", cmd_predict, "find every future day reaching the target")
    p.add_argument("--threshold")
    p.add_argument("--max-days", type=int)

    add("advise", cmd_advise, "eligibility assessment for today")
    add("summary", cmd_summary, "window total and average")
    add("reset", cmd_reset, "clear all recorded days")
    add("demo", cmd_demo, "run an in-memory example", needs_state=False)
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Entry point used by the console script: `from pointwindow.cli import main`.
    """
    return _main(argv)


def _main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not getattr(args, "cmd", None):
        parser.print_help()
        return 2

    try:
        return int(args.func(args))
    except PointWindowException as e:
        payload = {"ok": False, "error": problem_to_dict(e.problem), "exit_code": int(e.exit_code)}
        fmt = getattr(args, "format", "text")
        if fmt in ("json", "jsonl"):
            _print_payload(payload, fmt)
        else:
            err = payload["error"]
            print(f"ERROR[{err.get('code', 'PW_ERROR')}]: {err.get('message')}", file=sys.stderr)
            if err.get("remediation"):
                print(f"REMEDIATION: {err['remediation']}", file=sys.stderr)
            print(f"DETAILS: {err.get('details', {})}", file=sys.stderr)
        return int(e.exit_code)
    except ValueError as e:
        # bad --date/--today keys
        logger.debug("invalid input", exc_info=True)
        print(f"ERROR[PW_INVALID_INPUT]: {e}", file=sys.stderr)
        return int(ExitCode.RUNTIME_ERROR)
    except Exception as e:
        logger.exception("unexpected failure")
        print(f"ERROR[PW_INTERNAL_ERROR]: {e!r}", file=sys.stderr)
        return int(ExitCode.INTERNAL_ERROR)


if __name__ == "__main__":
    sys.exit(main())
