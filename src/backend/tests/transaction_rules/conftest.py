import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest


@pytest.fixture
def make_condition():
    def _make(field: str = "merchant", operator: str = "contains", **attrs) -> dict:
        condition = {"field": field, "operator": operator}
        condition.update(attrs)
        return condition

    return _make


@pytest.fixture
def make_rule(make_condition):
    def _make(*conditions: dict, logic: str = "AND") -> dict:
        if not conditions:
            conditions = (make_condition(value="starbucks"),)
        return {"logic": logic, "conditions": list(conditions)}

    return _make
