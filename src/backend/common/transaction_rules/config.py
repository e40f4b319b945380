from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()

OUTPUT_FORMATS = ("text", "json")


@dataclass(frozen=True)
class RulesToolConfig:
    log_level: str
    output_format: str

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def get_rules_tool_config() -> RulesToolConfig:
    """
    Load rule tooling configuration from environment variables.

    Reads:
      RULES_LOG_LEVEL (default WARNING), RULES_OUTPUT_FORMAT (text | json, default text)
    """
    return RulesToolConfig(
        log_level=parse_log_level(os.getenv("RULES_LOG_LEVEL", "WARNING")),
        output_format=_parse_output_format(os.getenv("RULES_OUTPUT_FORMAT", "text")),
    )


def parse_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"RULES_LOG_LEVEL must be a logging level name, got {raw!r}.")
    return level


def _parse_output_format(raw: str) -> str:
    fmt = raw.strip().lower()
    if fmt not in OUTPUT_FORMATS:
        raise ValueError("RULES_OUTPUT_FORMAT must be 'text' or 'json'.")
    return fmt
