from __future__ import annotations

from enum import Enum, IntEnum
from typing import Annotated, Dict, FrozenSet, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LogicOperator(str, Enum):
    AND = "AND"
    OR = "OR"


class FieldName(str, Enum):
    MERCHANT = "merchant"
    TX_DESC = "tx_desc"
    TX_DIRECTION = "tx_direction"
    ACCOUNT_TYPE = "account_type"
    ACCOUNT_NAME = "account_name"
    BANK = "bank"
    CURRENCY = "currency"
    AMOUNT = "amount"


class StringOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    CONTAINS_ANY = "contains_any"
    REGEX = "regex"


class NumericOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    BETWEEN = "between"


class TransactionDirection(IntEnum):
    UNKNOWN = 0
    CREDIT = 1
    DEBIT = 2


class FieldClass(str, Enum):
    STRING = "string"
    NUMERIC = "numeric"


class ErrorCode(str, Enum):
    INVALID_JSON = "INVALID_JSON"
    REQUIRED_FIELD = "REQUIRED_FIELD"
    INVALID_VALUE = "INVALID_VALUE"
    INVALID_FIELD = "INVALID_FIELD"
    INVALID_OPERATOR_FOR_FIELD = "INVALID_OPERATOR_FOR_FIELD"
    CONFLICTING_FIELDS = "CONFLICTING_FIELDS"
    INVALID_RANGE = "INVALID_RANGE"
    INVALID_FIELD_FOR_TYPE = "INVALID_FIELD_FOR_TYPE"
    INVALID_REGEX = "INVALID_REGEX"


# Every FieldName must appear here exactly once.
_FIELD_CLASSES: Dict[FieldName, FieldClass] = {
    FieldName.MERCHANT: FieldClass.STRING,
    FieldName.TX_DESC: FieldClass.STRING,
    FieldName.ACCOUNT_TYPE: FieldClass.STRING,
    FieldName.ACCOUNT_NAME: FieldClass.STRING,
    FieldName.BANK: FieldClass.STRING,
    FieldName.CURRENCY: FieldClass.STRING,
    FieldName.AMOUNT: FieldClass.NUMERIC,
    FieldName.TX_DIRECTION: FieldClass.NUMERIC,
}

_unclassified = set(FieldName) - set(_FIELD_CLASSES)
if _unclassified:
    raise RuntimeError(f"Unclassified rule fields: {sorted(f.value for f in _unclassified)}")

ALL_FIELDS: FrozenSet[str] = frozenset(f.value for f in FieldName)
STRING_FIELDS: FrozenSet[str] = frozenset(
    f.value for f, cls in _FIELD_CLASSES.items() if cls is FieldClass.STRING
)
NUMERIC_FIELDS: FrozenSet[str] = frozenset(
    f.value for f, cls in _FIELD_CLASSES.items() if cls is FieldClass.NUMERIC
)
STRING_OPERATORS: FrozenSet[str] = frozenset(op.value for op in StringOperator)
NUMERIC_OPERATORS: FrozenSet[str] = frozenset(op.value for op in NumericOperator)

OPERATORS_BY_CLASS: Dict[FieldClass, FrozenSet[str]] = {
    FieldClass.STRING: STRING_OPERATORS,
    FieldClass.NUMERIC: NUMERIC_OPERATORS,
}

TX_DIRECTION_VALUES: Tuple[int, ...] = tuple(d.value for d in TransactionDirection)

MULTI_VALUE_OPERATOR = StringOperator.CONTAINS_ANY.value
RANGE_OPERATOR = NumericOperator.BETWEEN.value


def field_class(field: Union[FieldName, str]) -> FieldClass:
    return _FIELD_CLASSES[FieldName(field)]


def operators_for_field(field: Union[FieldName, str]) -> FrozenSet[str]:
    return OPERATORS_BY_CLASS[field_class(field)]


SingleValueOperator = Literal[
    "equals",
    "not_equals",
    "contains",
    "not_contains",
    "starts_with",
    "ends_with",
    "regex",
    "greater_than",
    "less_than",
]


class _ConditionBase(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    field: FieldName
    # Only meaningful for string fields.
    case_sensitive: Optional[bool] = None

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class SingleValueCondition(_ConditionBase):
    operator: SingleValueOperator
    value: Union[str, int, float]


class MultiValueCondition(_ConditionBase):
    operator: Literal["contains_any"]
    values: Tuple[str, ...]


class RangeCondition(_ConditionBase):
    operator: Literal["between"]
    min_value: Union[int, float]
    max_value: Union[int, float]


RuleCondition = Annotated[
    Union[SingleValueCondition, MultiValueCondition, RangeCondition],
    Field(discriminator="operator"),
]


class TransactionRule(BaseModel):
    """A logic operator applied across an ordered list of conditions.

    Instances are immutable snapshots; `to_dict` gives the wire shape that
    is persisted and handed to the categorization service.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    logic: LogicOperator
    conditions: Tuple[RuleCondition, ...]

    def to_dict(self) -> dict:
        return {
            "logic": self.logic,
            "conditions": [c.to_dict() for c in self.conditions],
        }


class ValidationError(BaseModel):
    code: ErrorCode
    message: str
    field: Optional[str] = None
    path: Optional[str] = None


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[ValidationError] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_errors_match_outcome(self) -> "ValidationResult":
        if self.is_valid and self.errors:
            raise ValueError("a valid result cannot carry errors")
        if not self.is_valid and not self.errors:
            raise ValueError("an invalid result needs at least one error")
        return self

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, errors: List[ValidationError]) -> "ValidationResult":
        return cls(is_valid=False, errors=list(errors))

    @classmethod
    def from_errors(cls, errors: List[ValidationError]) -> "ValidationResult":
        return cls.invalid(errors) if errors else cls.valid()

    @property
    def first_error(self) -> Optional[ValidationError]:
        return self.errors[0] if self.errors else None

    def codes(self) -> List[ErrorCode]:
        return [e.code for e in self.errors]
