"""
Root pytest configuration for the Django project.

pytest-django configures settings from pyproject.toml
(DJANGO_SETTINGS_MODULE = config.settings) and creates the test database
from migrations. App-specific fixtures are defined in each app's
tests/conftest.py.
"""

import pytest


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full payment journeys)
    - test_services.py, test_tasks.py, test_router.py, etc. → integration
    - test_models.py, test_ledger_rules.py, test_adapters.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_services.py",
        "test_tasks.py",
        "test_router.py",
        "test_concurrency.py",
        "test_refund_service.py",
        "test_transaction_service.py",
        "test_room_balance.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_ledger_rules.py",
        "test_money.py",
        "test_adapters.py",
        "test_registry.py",
        "test_state_transitions.py",
        "test_core.py",
    ]

    for item in items:
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            # Default: integration (safe for Django where most tests hit DB)
            item.add_marker(pytest.mark.integration)
