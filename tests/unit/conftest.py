"""
Unit test fixtures. Pure functions only; no database session needed.
"""
import pytest

from learnpath.utils.permissions import PermissionSet


@pytest.fixture
def no_permissions():
    return PermissionSet()
