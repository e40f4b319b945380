import json

import yaml

from common.transaction_rules.catalog import build_catalog, main


def test_catalog_classifies_every_field():
    catalog = build_catalog()
    by_name = {entry.name: entry for entry in catalog.fields}
    assert set(by_name) == {
        "merchant",
        "tx_desc",
        "tx_direction",
        "account_type",
        "account_name",
        "bank",
        "currency",
        "amount",
    }
    assert by_name["amount"].field_class == "numeric"
    assert "between" in by_name["amount"].operators
    assert "contains_any" not in by_name["amount"].operators
    assert by_name["merchant"].field_class == "string"
    assert by_name["merchant"].operators[0] == "equals"


def test_catalog_lists_error_codes_and_directions():
    catalog = build_catalog()
    assert "INVALID_REGEX" in catalog.error_codes
    assert len(catalog.error_codes) == 9
    assert catalog.tx_direction_values == {"unknown": 0, "credit": 1, "debit": 2}


def test_catalog_templates_are_sorted():
    names = [t.name for t in build_catalog().templates]
    assert names == sorted(names)


def test_main_json(capsys):
    main(["--format", "json"])
    data = json.loads(capsys.readouterr().out)
    assert data["numeric_operators"] == ["equals", "not_equals", "greater_than", "less_than", "between"]


def test_main_yaml_default(capsys):
    main([])
    data = yaml.safe_load(capsys.readouterr().out)
    assert len(data["fields"]) == 8
