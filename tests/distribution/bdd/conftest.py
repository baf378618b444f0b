"""Shared BDD fixtures and step definitions for the Distribution domain."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import then


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the action fails with a validation error")
def action_fails_with_validation_error(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)
