from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, Field

from .examples import RULE_TEMPLATES, template_placeholders
from .models import (
    ErrorCode,
    FieldClass,
    FieldName,
    NumericOperator,
    StringOperator,
    TransactionDirection,
    field_class,
)


class FieldCatalogEntry(BaseModel):
    name: str
    field_class: str
    operators: List[str]


class TemplateCatalogEntry(BaseModel):
    name: str
    description: str
    placeholders: List[str] = Field(default_factory=list)
    template: Dict[str, Any]


class RuleCatalog(BaseModel):
    fields: List[FieldCatalogEntry]
    string_operators: List[str]
    numeric_operators: List[str]
    tx_direction_values: Dict[str, int]
    error_codes: List[str]
    templates: List[TemplateCatalogEntry] = Field(default_factory=list)


def build_catalog() -> RuleCatalog:
    fields: List[FieldCatalogEntry] = []
    for field in FieldName:
        fields.append(
            FieldCatalogEntry(
                name=field.value,
                field_class=field_class(field).value,
                # Declaration order, not set order.
                operators=[op.value for op in _operator_enum(field)],
            )
        )
    fields.sort(key=lambda e: e.name)

    templates = [
        TemplateCatalogEntry(
            name=name,
            description=tpl.description,
            placeholders=template_placeholders(name),
            template=tpl.template,
        )
        for name, tpl in sorted(RULE_TEMPLATES.items())
    ]

    return RuleCatalog(
        fields=fields,
        string_operators=[op.value for op in StringOperator],
        numeric_operators=[op.value for op in NumericOperator],
        tx_direction_values={d.name.lower(): d.value for d in TransactionDirection},
        error_codes=[code.value for code in ErrorCode],
        templates=templates,
    )


def _operator_enum(field: FieldName) -> type:
    return StringOperator if field_class(field) is FieldClass.STRING else NumericOperator


def _dump_json(catalog: dict[str, Any]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True)


def _dump_yaml(catalog: dict[str, Any]) -> str:
    return yaml.safe_dump(catalog, sort_keys=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Print the transaction rule grammar catalog.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    args = parser.parse_args(argv)

    catalog = build_catalog().model_dump(mode="json")
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()
