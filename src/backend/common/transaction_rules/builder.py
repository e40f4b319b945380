from __future__ import annotations

from typing import List, NamedTuple, Optional, Sequence, Union

from pydantic import TypeAdapter

from .models import (
    MULTI_VALUE_OPERATOR,
    NUMERIC_FIELDS,
    NUMERIC_OPERATORS,
    RANGE_OPERATOR,
    STRING_FIELDS,
    STRING_OPERATORS,
    FieldName,
    LogicOperator,
    NumericOperator,
    RuleCondition,
    StringOperator,
    TransactionRule,
    ValidationError,
    ValidationResult,
)
from .validator import is_number, validate_condition, validate_rule

Number = Union[int, float]

_condition_adapter: TypeAdapter = TypeAdapter(RuleCondition)


class RuleBuildError(ValueError):
    def __init__(self, message: str, errors: Optional[List[ValidationError]] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class BuildResult(NamedTuple):
    rule: TransactionRule
    validation: ValidationResult


def _enum_value(value: object) -> object:
    return getattr(value, "value", value)


def _coerce_logic(logic: Union[LogicOperator, str]) -> str:
    try:
        return LogicOperator(_enum_value(logic)).value
    except ValueError:
        raise RuleBuildError(f"logic must be 'AND' or 'OR', got {logic!r}") from None


class RuleBuilder:
    """Fluent, single-owner scratchpad for assembling a `TransactionRule`.

    Every add-method fails immediately on input the validator would reject,
    so a rule returned by `build` always validates. `build` returns an
    immutable snapshot; the builder may keep being used afterwards.
    """

    def __init__(self, logic: Union[LogicOperator, str] = LogicOperator.AND):
        self._logic: Optional[str] = _coerce_logic(logic)
        self._conditions: list = []

    def set_logic(self, logic: Union[LogicOperator, str]) -> "RuleBuilder":
        self._logic = _coerce_logic(logic)
        return self

    def add_string_condition(
        self,
        field: Union[FieldName, str],
        operator: Union[StringOperator, str],
        value: Optional[str] = None,
        *,
        values: Optional[Sequence[str]] = None,
        case_sensitive: Optional[bool] = None,
    ) -> "RuleBuilder":
        field = _enum_value(field)
        operator = _enum_value(operator)
        if field not in STRING_FIELDS:
            raise RuleBuildError(f"{field!r} is not a string field")
        if operator not in STRING_OPERATORS:
            raise RuleBuildError(f"{operator!r} is not a string operator")

        condition: dict = {
            "field": field,
            "operator": operator,
            "case_sensitive": False if case_sensitive is None else case_sensitive,
        }
        if operator == MULTI_VALUE_OPERATOR:
            if isinstance(values, (str, bytes)):
                raise RuleBuildError("contains_any values must be a list of strings, not a single string")
            if not values:
                raise RuleBuildError("contains_any operator requires values array")
            condition["values"] = list(values)
        else:
            if not value:
                raise RuleBuildError(f"{operator} operator requires value")
            condition["value"] = value

        return self._append(condition)

    def add_numeric_condition(
        self,
        field: Union[FieldName, str],
        operator: Union[NumericOperator, str],
        value: Optional[Number] = None,
        *,
        min_value: Optional[Number] = None,
        max_value: Optional[Number] = None,
    ) -> "RuleBuilder":
        field = _enum_value(field)
        operator = _enum_value(operator)
        if field not in NUMERIC_FIELDS:
            raise RuleBuildError(f"{field!r} is not a numeric field")
        if operator not in NUMERIC_OPERATORS:
            raise RuleBuildError(f"{operator!r} is not a numeric operator")

        condition: dict = {"field": field, "operator": operator}
        if operator == RANGE_OPERATOR:
            if min_value is None or max_value is None:
                raise RuleBuildError("between operator requires min_value and max_value")
            if is_number(min_value) and is_number(max_value) and not min_value < max_value:
                raise RuleBuildError("min_value must be less than max_value")
            condition["min_value"] = min_value
            condition["max_value"] = max_value
        else:
            if value is None:
                raise RuleBuildError(f"{operator} operator requires value")
            condition["value"] = _enum_value(value)

        return self._append(condition)

    def add_merchant_condition(
        self,
        operator: Union[StringOperator, str],
        value: Optional[str] = None,
        *,
        values: Optional[Sequence[str]] = None,
        case_sensitive: Optional[bool] = None,
    ) -> "RuleBuilder":
        return self.add_string_condition(
            FieldName.MERCHANT, operator, value, values=values, case_sensitive=case_sensitive
        )

    def add_amount_condition(
        self,
        operator: Union[NumericOperator, str],
        value: Optional[Number] = None,
        *,
        min_value: Optional[Number] = None,
        max_value: Optional[Number] = None,
    ) -> "RuleBuilder":
        return self.add_numeric_condition(
            FieldName.AMOUNT, operator, value, min_value=min_value, max_value=max_value
        )

    def _append(self, condition: dict) -> "RuleBuilder":
        errors = validate_condition(condition, len(self._conditions))
        if errors:
            raise RuleBuildError(errors[0].message, errors)
        self._conditions.append(_condition_adapter.validate_python(condition))
        return self

    def build(self) -> TransactionRule:
        if not self._logic:
            raise RuleBuildError("Logic operator is required")
        if not self._conditions:
            raise RuleBuildError("At least one condition is required")
        return TransactionRule(logic=self._logic, conditions=tuple(self._conditions))

    def build_and_validate(self) -> BuildResult:
        rule = self.build()
        return BuildResult(rule=rule, validation=validate_rule(rule))


def create_rule_builder(logic: Union[LogicOperator, str] = LogicOperator.AND) -> RuleBuilder:
    return RuleBuilder(logic)
