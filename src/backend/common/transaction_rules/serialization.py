from __future__ import annotations

import json
from typing import Any, NamedTuple, Optional, Union

from .models import ErrorCode, TransactionRule, ValidationError, ValidationResult
from .validator import validate_rule


class RuleValidationError(ValueError):
    def __init__(self, result: ValidationResult):
        first = result.first_error
        super().__init__(first.message if first else "Rule is invalid")
        self.result = result


class ParsedRule(NamedTuple):
    rule: Optional[TransactionRule]
    validation: ValidationResult


def rule_to_json(rule: Union[TransactionRule, dict], indent: Optional[int] = 2) -> str:
    data = rule.to_dict() if isinstance(rule, TransactionRule) else rule
    # NaN and Infinity are not JSON; json.dumps raises ValueError for them.
    return json.dumps(data, indent=indent, allow_nan=False)


def rule_from_dict(data: Any) -> TransactionRule:
    """Validate plain data and return the typed rule.

    Raises `RuleValidationError` (with the full result attached) if the data
    does not satisfy the grammar.
    """
    result = validate_rule(data)
    if not result.is_valid:
        raise RuleValidationError(result)
    return TransactionRule.model_validate(data)


def parse_rule(text: Union[str, bytes]) -> ParsedRule:
    try:
        data = json.loads(text)
    except ValueError as exc:
        return ParsedRule(
            rule=None,
            validation=ValidationResult.invalid(
                [ValidationError(code=ErrorCode.INVALID_JSON, message=f"Invalid JSON: {exc}")]
            ),
        )

    validation = validate_rule(data)
    if not validation.is_valid:
        return ParsedRule(rule=None, validation=validation)
    return ParsedRule(rule=TransactionRule.model_validate(data), validation=validation)
