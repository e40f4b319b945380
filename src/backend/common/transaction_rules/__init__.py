"""Transaction categorization rule definitions.

This package intentionally contains only domain logic:
- Rules are built with `RuleBuilder` or decoded from stored JSON.
- `validate_rule` checks any candidate against the grammar and reports every problem.
- Applying rules to transactions lives in the categorization service, not here.
"""

from .builder import BuildResult, RuleBuildError, RuleBuilder, create_rule_builder
from .models import (
    ALL_FIELDS,
    NUMERIC_FIELDS,
    NUMERIC_OPERATORS,
    STRING_FIELDS,
    STRING_OPERATORS,
    ErrorCode,
    FieldClass,
    FieldName,
    LogicOperator,
    MultiValueCondition,
    NumericOperator,
    RangeCondition,
    SingleValueCondition,
    StringOperator,
    TransactionDirection,
    TransactionRule,
    ValidationError,
    ValidationResult,
    field_class,
    operators_for_field,
)
from .serialization import ParsedRule, RuleValidationError, parse_rule, rule_from_dict, rule_to_json
from .validator import validate_condition, validate_rule

__all__ = [
    "ALL_FIELDS",
    "NUMERIC_FIELDS",
    "NUMERIC_OPERATORS",
    "STRING_FIELDS",
    "STRING_OPERATORS",
    "BuildResult",
    "ErrorCode",
    "FieldClass",
    "FieldName",
    "LogicOperator",
    "MultiValueCondition",
    "NumericOperator",
    "ParsedRule",
    "RangeCondition",
    "RuleBuildError",
    "RuleBuilder",
    "RuleValidationError",
    "SingleValueCondition",
    "StringOperator",
    "TransactionDirection",
    "TransactionRule",
    "ValidationError",
    "ValidationResult",
    "create_rule_builder",
    "field_class",
    "operators_for_field",
    "parse_rule",
    "rule_from_dict",
    "rule_to_json",
    "validate_condition",
    "validate_rule",
]
