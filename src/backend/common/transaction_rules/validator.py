from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from typing import Any, List, Optional

from .models import (
    ALL_FIELDS,
    MULTI_VALUE_OPERATOR,
    NUMERIC_FIELDS,
    NUMERIC_OPERATORS,
    RANGE_OPERATOR,
    STRING_FIELDS,
    STRING_OPERATORS,
    TX_DIRECTION_VALUES,
    ErrorCode,
    FieldName,
    TransactionRule,
    ValidationError,
    ValidationResult,
)

logger = logging.getLogger(__name__)

LOGIC_VALUES = ("AND", "OR")


def _present(condition: Mapping, key: str) -> bool:
    # JSON null counts as absent.
    return condition.get(key) is not None


def _missing(value: Any) -> bool:
    # Falsy scalars (None, False, 0, "", NaN) count as not supplied; an empty list does not.
    if isinstance(value, (list, dict)):
        return False
    if isinstance(value, float) and math.isnan(value):
        return True
    return not value


def is_number(value: Any) -> bool:
    """True for finite ints and floats. Booleans, NaN and infinities are not numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not isinstance(value, float) or math.isfinite(value)


def validate_rule(rule: Any) -> ValidationResult:
    """Check an arbitrary value against the complete rule grammar.

    Never raises for bad rule content: every problem found is reported in the
    returned result. Condition errors carry `path="conditions[i]"`; rule-level
    errors carry no path.
    """
    if isinstance(rule, TransactionRule):
        rule = rule.to_dict()

    if not isinstance(rule, Mapping):
        return ValidationResult.invalid(
            [ValidationError(code=ErrorCode.INVALID_JSON, message="Rule must be a valid object")]
        )

    errors: List[ValidationError] = []

    logic = rule.get("logic")
    if _missing(logic):
        errors.append(
            ValidationError(code=ErrorCode.REQUIRED_FIELD, message="logic field is required", field="logic")
        )
    elif logic not in LOGIC_VALUES:
        errors.append(
            ValidationError(code=ErrorCode.INVALID_VALUE, message="logic must be 'AND' or 'OR'", field="logic")
        )

    conditions = rule.get("conditions")
    if _missing(conditions):
        errors.append(
            ValidationError(
                code=ErrorCode.REQUIRED_FIELD, message="conditions field is required", field="conditions"
            )
        )
    elif not isinstance(conditions, list):
        errors.append(
            ValidationError(code=ErrorCode.INVALID_VALUE, message="conditions must be an array", field="conditions")
        )
    elif not conditions:
        errors.append(
            ValidationError(
                code=ErrorCode.INVALID_VALUE, message="At least one condition is required", field="conditions"
            )
        )
    else:
        for index, condition in enumerate(conditions):
            errors.extend(validate_condition(condition, index))

    logger.debug("Validated rule: %d error(s)", len(errors))
    return ValidationResult.from_errors(errors)


def validate_condition(condition: Any, index: int) -> List[ValidationError]:
    path = f"conditions[{index}]"
    errors: List[ValidationError] = []

    def add(code: ErrorCode, message: str, field: Optional[str]) -> None:
        errors.append(ValidationError(code=code, message=message, field=field, path=path))

    if not isinstance(condition, Mapping):
        add(ErrorCode.INVALID_VALUE, "condition must be an object", None)
        return errors

    field = condition.get("field")
    if _missing(field):
        add(ErrorCode.REQUIRED_FIELD, "field is required", "field")
        return errors
    if not isinstance(field, str) or field not in ALL_FIELDS:
        add(ErrorCode.INVALID_FIELD, f"Invalid field: {field}", "field")
        return errors

    operator = condition.get("operator")
    if _missing(operator):
        add(ErrorCode.REQUIRED_FIELD, "operator is required", "operator")
        return errors

    is_string_field = field in STRING_FIELDS
    is_numeric_field = field in NUMERIC_FIELDS

    if not isinstance(operator, str):
        add(ErrorCode.INVALID_OPERATOR_FOR_FIELD, f"Invalid operator '{operator}' for field '{field}'", "operator")
    elif is_string_field and operator not in STRING_OPERATORS:
        add(
            ErrorCode.INVALID_OPERATOR_FOR_FIELD,
            f"Invalid operator '{operator}' for string field '{field}'",
            "operator",
        )
    elif is_numeric_field and operator not in NUMERIC_OPERATORS:
        add(
            ErrorCode.INVALID_OPERATOR_FOR_FIELD,
            f"Invalid operator '{operator}' for numeric field '{field}'",
            "operator",
        )

    has_value = _present(condition, "value")
    has_values = _present(condition, "values")
    has_min = _present(condition, "min_value")
    has_max = _present(condition, "max_value")

    # Value shape.
    if operator == MULTI_VALUE_OPERATOR:
        values = condition.get("values")
        if not isinstance(values, list):
            add(ErrorCode.CONFLICTING_FIELDS, "contains_any operator requires values array", "values")
        elif not values:
            add(ErrorCode.INVALID_VALUE, "contains_any operator requires at least one value", "values")
        elif not all(isinstance(v, str) for v in values):
            add(ErrorCode.INVALID_VALUE, "values must all be strings", "values")
        if has_value:
            add(ErrorCode.CONFLICTING_FIELDS, "contains_any operator should not have value field", "value")
        if has_min or has_max:
            add(
                ErrorCode.CONFLICTING_FIELDS,
                "contains_any operator should not have min_value or max_value fields",
                "min_value,max_value",
            )
    elif operator == RANGE_OPERATOR:
        if not (has_min and has_max):
            add(
                ErrorCode.CONFLICTING_FIELDS,
                "between operator requires min_value and max_value",
                "min_value,max_value",
            )
        elif is_number(condition["min_value"]) and is_number(condition["max_value"]):
            if not condition["min_value"] < condition["max_value"]:
                add(ErrorCode.INVALID_RANGE, "min_value must be less than max_value", "min_value,max_value")
        if has_value:
            add(ErrorCode.CONFLICTING_FIELDS, "between operator should not have value field", "value")
        if has_values:
            add(ErrorCode.CONFLICTING_FIELDS, "between operator should not have values field", "values")
    else:
        if not has_value:
            add(ErrorCode.REQUIRED_FIELD, f"{operator} operator requires value", "value")
        if has_values:
            add(ErrorCode.CONFLICTING_FIELDS, f"{operator} operator should not have values field", "values")
        if has_min or has_max:
            add(
                ErrorCode.CONFLICTING_FIELDS,
                f"{operator} operator should not have min_value or max_value fields",
                "min_value,max_value",
            )

    # Value types: string fields compare text, numeric fields compare numbers.
    if is_string_field:
        if has_value and not isinstance(condition["value"], str):
            add(ErrorCode.INVALID_VALUE, f"value for string field '{field}' must be a string", "value")
        for key in ("min_value", "max_value"):
            if _present(condition, key) and not is_number(condition[key]):
                add(ErrorCode.INVALID_VALUE, f"{key} must be a finite number", key)
    else:
        for key in ("value", "min_value", "max_value"):
            if _present(condition, key) and not is_number(condition[key]):
                add(ErrorCode.INVALID_VALUE, f"{key} for numeric field '{field}' must be a finite number", key)

    if condition.get("case_sensitive") is not None:
        if is_numeric_field:
            add(ErrorCode.INVALID_FIELD_FOR_TYPE, "case_sensitive only applies to string fields", "case_sensitive")
        elif not isinstance(condition["case_sensitive"], bool):
            add(ErrorCode.INVALID_VALUE, "case_sensitive must be a boolean", "case_sensitive")

    if "currency" in condition and condition["currency"] is not None:
        add(
            ErrorCode.INVALID_FIELD_FOR_TYPE,
            "currency property is not supported. Use a separate currency field condition instead",
            "currency",
        )

    if field == FieldName.TX_DIRECTION.value and has_value and is_number(condition["value"]):
        if condition["value"] not in TX_DIRECTION_VALUES:
            add(ErrorCode.INVALID_VALUE, "tx_direction must be 0, 1, or 2", "value")

    if field == FieldName.AMOUNT.value:
        if has_value and is_number(condition["value"]) and condition["value"] < 0:
            add(ErrorCode.INVALID_VALUE, "amount must be non-negative", "value")
        for key in ("min_value", "max_value"):
            if _present(condition, key) and is_number(condition[key]) and condition[key] < 0:
                add(ErrorCode.INVALID_VALUE, f"{key} must be non-negative", key)

    if operator == "regex" and has_value and isinstance(condition["value"], str):
        # Huge repeat counts overflow and deep nesting exhausts the recursion limit.
        try:
            re.compile(condition["value"])
        except (re.error, OverflowError, RecursionError) as exc:
            add(ErrorCode.INVALID_REGEX, f"Invalid regex pattern: {exc}", "value")

    return errors
