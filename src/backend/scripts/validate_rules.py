from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("scripts.validate_rules")


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


_ensure_backend_on_path()

from common.transaction_rules.config import OUTPUT_FORMATS, get_rules_tool_config, parse_log_level  # noqa: E402
from common.transaction_rules.models import ErrorCode, ValidationError, ValidationResult  # noqa: E402
from common.transaction_rules.validator import validate_rule  # noqa: E402


@dataclass
class RuleReport:
    source: str
    name: str
    result: ValidationResult


@dataclass
class ValidationRun:
    reports: list[RuleReport] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.result.is_valid for r in self.reports)

    @property
    def invalid_count(self) -> int:
        return sum(1 for r in self.reports if not r.result.is_valid)


def _load_json(path: Path):
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)


def _iter_rules(payload: Any) -> list[tuple[str, Any]]:
    """Split a file payload into (name, rule) pairs.

    Accepts a single rule object, a list of rules, or `{"rules": {name: rule}}`.
    """
    if isinstance(payload, list):
        return [(f"[{idx}]", rule) for idx, rule in enumerate(payload)]
    if isinstance(payload, dict) and isinstance(payload.get("rules"), dict):
        return [(str(name), rule) for name, rule in payload["rules"].items()]
    return [("rule", payload)]


def validate_paths(paths: list[Path]) -> ValidationRun:
    run = ValidationRun()
    for path in paths:
        try:
            payload = _load_json(path)
        except (OSError, ValueError) as exc:
            logger.warning("Could not load %s: %s", path, exc)
            run.reports.append(
                RuleReport(
                    source=str(path),
                    name="-",
                    result=ValidationResult.invalid(
                        [ValidationError(code=ErrorCode.INVALID_JSON, message=f"Invalid JSON: {exc}")]
                    ),
                )
            )
            continue

        for name, rule in _iter_rules(payload):
            result = validate_rule(rule)
            logger.info("%s %s: %s", path, name, "valid" if result.is_valid else "invalid")
            run.reports.append(RuleReport(source=str(path), name=name, result=result))
    return run


def _format_text(run: ValidationRun) -> str:
    lines: list[str] = []
    for report in run.reports:
        status = "VALID" if report.result.is_valid else "INVALID"
        lines.append(f"{report.source} {report.name}: {status}")
        for err in report.result.errors:
            location = err.path or "rule"
            if err.field:
                location = f"{location}.{err.field}"
            lines.append(f"  - [{err.code.value}] {location}: {err.message}")
    lines.append("")
    lines.append(f"{len(run.reports)} rule(s) checked, {run.invalid_count} invalid.")
    return "\n".join(lines)


def _format_json(run: ValidationRun) -> str:
    return json.dumps(
        [
            {
                "source": r.source,
                "name": r.name,
                **r.result.model_dump(mode="json", exclude_none=True),
            }
            for r in run.reports
        ],
        indent=2,
    )


def _log_level_arg(raw: str) -> str:
    try:
        return parse_log_level(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"unknown logging level {raw!r}") from None


def main(argv: list[str] | None = None) -> int:
    config = get_rules_tool_config()

    parser = argparse.ArgumentParser(description="Validate transaction rule JSON files.")
    parser.add_argument("paths", nargs="+", type=Path, help="Rule JSON files to validate.")
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=config.output_format,
        help=f"Report format (default: {config.output_format}).",
    )
    parser.add_argument(
        "--log-level",
        type=_log_level_arg,
        default=config.log_level,
        help=f"Logging level (default: {config.log_level}).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    run = validate_paths(args.paths)
    if args.format == "json":
        print(_format_json(run))
    else:
        print(_format_text(run))

    return 0 if run.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
