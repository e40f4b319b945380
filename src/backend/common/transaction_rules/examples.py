"""Ready-made rules, rule patterns and fill-in templates.

The factories here are what the rule wizard offers as starting points; every
one of them goes through `RuleBuilder`, so their output always validates.
"""

from __future__ import annotations

import copy
import re
from typing import Any, Callable, Dict, Iterable, Optional

from pydantic import BaseModel

from .builder import create_rule_builder
from .models import FieldName, TransactionDirection, TransactionRule
from .serialization import rule_to_json


def starbucks() -> TransactionRule:
    return create_rule_builder("AND").add_merchant_condition("contains", "starbucks", case_sensitive=False).build()


def grocery_expense() -> TransactionRule:
    return (
        create_rule_builder("AND")
        .add_amount_condition("between", min_value=50.0, max_value=200.0)
        .add_merchant_condition("contains_any", values=["grocery", "market", "food"], case_sensitive=False)
        .add_string_condition(FieldName.CURRENCY, "equals", "USD")
        .build()
    )


def amazon() -> TransactionRule:
    return (
        create_rule_builder("OR")
        .add_merchant_condition("equals", "Amazon", case_sensitive=False)
        .add_merchant_condition("regex", "^AMZN.*", case_sensitive=False)
        .build()
    )


def large_debit() -> TransactionRule:
    return (
        create_rule_builder("AND")
        .add_numeric_condition(FieldName.TX_DIRECTION, "equals", TransactionDirection.DEBIT)
        .add_amount_condition("greater_than", 100.0)
        .build()
    )


def restaurant_dinner() -> TransactionRule:
    return (
        create_rule_builder("AND")
        .add_merchant_condition(
            "contains_any", values=["restaurant", "cafe", "bistro", "grill"], case_sensitive=False
        )
        .add_amount_condition("between", min_value=25.0, max_value=150.0)
        .add_numeric_condition(FieldName.TX_DIRECTION, "equals", TransactionDirection.DEBIT)
        .build()
    )


def chase_account() -> TransactionRule:
    return (
        create_rule_builder("AND")
        .add_string_condition(FieldName.BANK, "contains", "chase", case_sensitive=False)
        .add_string_condition(FieldName.ACCOUNT_TYPE, "equals", "checking", case_sensitive=False)
        .build()
    )


EXAMPLE_RULES: Dict[str, Callable[[], TransactionRule]] = {
    "starbucks": starbucks,
    "grocery_expense": grocery_expense,
    "amazon": amazon,
    "large_debit": large_debit,
    "restaurant_dinner": restaurant_dinner,
    "chase_account": chase_account,
}


def example_rules_as_json() -> Dict[str, str]:
    return {name: rule_to_json(factory()) for name, factory in EXAMPLE_RULES.items()}


# Patterns


def merchant_contains(merchant: str, case_sensitive: bool = False) -> TransactionRule:
    return create_rule_builder("AND").add_merchant_condition("contains", merchant, case_sensitive=case_sensitive).build()


def merchant_equals(merchant: str, case_sensitive: bool = False) -> TransactionRule:
    return create_rule_builder("AND").add_merchant_condition("equals", merchant, case_sensitive=case_sensitive).build()


def amount_range(min_amount: float, max_amount: float, currency: Optional[str] = None) -> TransactionRule:
    builder = create_rule_builder("AND").add_amount_condition("between", min_value=min_amount, max_value=max_amount)
    if currency:
        builder.add_string_condition(FieldName.CURRENCY, "equals", currency)
    return builder.build()


def amount_greater_than(amount: float, currency: Optional[str] = None) -> TransactionRule:
    builder = create_rule_builder("AND").add_amount_condition("greater_than", amount)
    if currency:
        builder.add_string_condition(FieldName.CURRENCY, "equals", currency)
    return builder.build()


def amount_less_than(amount: float, currency: Optional[str] = None) -> TransactionRule:
    builder = create_rule_builder("AND").add_amount_condition("less_than", amount)
    if currency:
        builder.add_string_condition(FieldName.CURRENCY, "equals", currency)
    return builder.build()


def transaction_direction(direction: TransactionDirection | int) -> TransactionRule:
    return create_rule_builder("AND").add_numeric_condition(FieldName.TX_DIRECTION, "equals", direction).build()


def any_merchant(merchants: Iterable[str], case_sensitive: bool = False) -> TransactionRule:
    builder = create_rule_builder("OR")
    for merchant in merchants:
        builder.add_merchant_condition("equals", merchant, case_sensitive=case_sensitive)
    return builder.build()


def merchant_keywords(keywords: Iterable[str], case_sensitive: bool = False) -> TransactionRule:
    return (
        create_rule_builder("AND")
        .add_merchant_condition("contains_any", values=list(keywords), case_sensitive=case_sensitive)
        .build()
    )


def description_contains(description: str, case_sensitive: bool = False) -> TransactionRule:
    return (
        create_rule_builder("AND")
        .add_string_condition(FieldName.TX_DESC, "contains", description, case_sensitive=case_sensitive)
        .build()
    )


def account_type(account_type: str, case_sensitive: bool = False) -> TransactionRule:
    return (
        create_rule_builder("AND")
        .add_string_condition(FieldName.ACCOUNT_TYPE, "equals", account_type, case_sensitive=case_sensitive)
        .build()
    )


def bank_equals(bank: str, case_sensitive: bool = False) -> TransactionRule:
    return (
        create_rule_builder("AND")
        .add_string_condition(FieldName.BANK, "equals", bank, case_sensitive=case_sensitive)
        .build()
    )


# Templates


class RuleTemplate(BaseModel):
    description: str
    template: Dict[str, Any]


RULE_TEMPLATES: Dict[str, RuleTemplate] = {
    "basic_merchant": RuleTemplate(
        description="Match transactions from a specific merchant",
        template={
            "logic": "AND",
            "conditions": [
                {"field": "merchant", "operator": "contains", "value": "{{merchant_name}}", "case_sensitive": False},
            ],
        },
    ),
    "amount_threshold": RuleTemplate(
        description="Match transactions above a certain amount",
        template={
            "logic": "AND",
            "conditions": [
                {"field": "amount", "operator": "greater_than", "value": "{{amount_threshold}}"},
            ],
        },
    ),
    "merchant_and_amount": RuleTemplate(
        description="Match specific merchant with amount constraints",
        template={
            "logic": "AND",
            "conditions": [
                {"field": "merchant", "operator": "contains", "value": "{{merchant_name}}", "case_sensitive": False},
                {
                    "field": "amount",
                    "operator": "between",
                    "min_value": "{{min_amount}}",
                    "max_value": "{{max_amount}}",
                },
            ],
        },
    ),
    "merchant_keywords": RuleTemplate(
        description="Match transactions containing any of several keywords",
        template={
            "logic": "AND",
            "conditions": [
                {
                    "field": "merchant",
                    "operator": "contains_any",
                    "values": ["{{keyword1}}", "{{keyword2}}", "{{keyword3}}"],
                    "case_sensitive": False,
                },
            ],
        },
    ),
}

_PLACEHOLDER = re.compile(r"^\{\{(\w+)\}\}$")


def _fill(node: Any, params: Dict[str, Any]) -> Any:
    if isinstance(node, dict):
        return {key: _fill(value, params) for key, value in node.items()}
    if isinstance(node, list):
        return [_fill(item, params) for item in node]
    if isinstance(node, str):
        match = _PLACEHOLDER.match(node)
        if match:
            name = match.group(1)
            if name not in params:
                raise KeyError(f"Missing template parameter: {name}")
            return params[name]
    return node


def fill_template(name: str, **params: Any) -> Dict[str, Any]:
    """Substitute `{{placeholder}}` values in a named template.

    Returns plain data; run it through `validate_rule` before persisting.
    """
    template = RULE_TEMPLATES[name].template
    return _fill(copy.deepcopy(template), params)


def template_placeholders(name: str) -> list[str]:
    found: list[str] = []

    def _walk(node: Any) -> None:
        if isinstance(node, dict):
            for value in node.values():
                _walk(value)
        elif isinstance(node, list):
            for item in node:
                _walk(item)
        elif isinstance(node, str):
            match = _PLACEHOLDER.match(node)
            if match and match.group(1) not in found:
                found.append(match.group(1))

    _walk(RULE_TEMPLATES[name].template)
    return found
