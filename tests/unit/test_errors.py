"""
Unit tests for the error taxonomy.
"""

import errno

import pytest

from netlib import ErrorKind, NetlibError, StateError, ResolutionError, SystemCallError


class TestErrorKinds:
    """Tests for error classes and their kinds."""

    @pytest.mark.parametrize("cls, kind", [
        (StateError, ErrorKind.STATE),
        (ResolutionError, ErrorKind.RESOLUTION),
        (SystemCallError, ErrorKind.SYSTEM_CALL),
    ])
    def test_subclass_kind(self, cls, kind):
        """Test that every subclass carries its kind and shares the base."""
        error = cls("boom")

        assert error.kind is kind
        assert isinstance(error, NetlibError)
        assert str(error) == "boom"

    def test_base_kind_override(self):
        """Test that the base class accepts an explicit kind."""
        assert NetlibError("x", ErrorKind.STATE).kind is ErrorKind.STATE

    def test_from_os_error(self):
        """Test building a SystemCallError from an OSError."""
        os_error = OSError(errno.ECONNREFUSED, "Connection refused")
        error = SystemCallError.from_os_error("connect", "tcp.Socket.connect", os_error)

        assert error.operation == "connect"
        assert error.errno == errno.ECONNREFUSED
        assert "tcp.Socket.connect: connect() failed" in str(error)
