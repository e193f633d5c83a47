"""
Exception to HTTP status mapping tests.

Run with: pytest tests/unit/test_middleware.py -v
"""

import importlib
import warnings

import pytest

from supportdesk.core import (
    ApplicationException,
    ForbiddenException,
    ResourceNotFoundException,
    TransientIOException,
    UnauthorizedException,
    ValidationException,
)
from supportdesk.shared.api import middleware


class TestStatusMapping:

    @pytest.mark.parametrize("exc, expected", [
        (ValidationException("bad body"), 422),
        (ResourceNotFoundException("Ticket", "t-1"), 404),
        (UnauthorizedException("no identity"), 401),
        (ForbiddenException("change status", "MERCHANT"), 403),
        (TransientIOException("store offline"), 503),
        (ApplicationException("other"), 400),
    ])
    def test_status_code_for(self, exc, expected):
        assert middleware.status_code_for(exc) == expected

    def test_module_loads_without_deprecation_warnings(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            importlib.reload(middleware)
