"""
Unit tests for address resolution.
"""

import logging
import socket

import pytest

from netlib import ResolutionError, SystemCallError
from netlib.core import AddressInfo, resolve, open_endpoint


class TestResolve:
    """Tests for resolve()."""

    def test_ipv4_literal(self):
        """Test resolving a literal IPv4 address."""
        candidates = resolve("127.0.0.1", 12345)

        assert len(candidates) >= 1
        first = candidates[0]
        assert first.family == socket.AF_INET
        assert first.type == socket.SOCK_STREAM
        assert first.host == "127.0.0.1"
        assert first.port == 12345

    def test_invalid_port(self):
        """Test that out-of-range ports never reach getaddrinfo()."""
        with pytest.raises(ResolutionError):
            resolve("127.0.0.1", 70000)
        with pytest.raises(ResolutionError):
            resolve("127.0.0.1", -1)

    def test_getaddrinfo_failure(self, monkeypatch):
        """Test that gaierror is mapped to ResolutionError and chained."""
        error = socket.gaierror(socket.EAI_NONAME, "Name or service not known")

        def fail(*args, **kwargs):
            raise error

        monkeypatch.setattr(socket, "getaddrinfo", fail)

        with pytest.raises(ResolutionError) as info:
            resolve("no-such-host.invalid", 80)

        assert info.value.__cause__ is error
        assert info.value.port == 80


class TestOpenEndpoint:
    """Tests for open_endpoint()."""

    def test_skips_failing_candidate(self, monkeypatch, caplog):
        """Test that a failing family is logged and the next one is used."""
        real_socket = socket.socket
        ipv6 = AddressInfo(socket.AF_INET6, socket.SOCK_STREAM, 6, ("::1", 80, 0, 0))
        ipv4 = AddressInfo(socket.AF_INET, socket.SOCK_STREAM, 6, ("127.0.0.1", 80))

        def fake_socket(family=-1, type=-1, proto=-1, fileno=None):
            if family == socket.AF_INET6:
                raise OSError(97, "Address family not supported by protocol")
            return real_socket(family, type, proto)

        monkeypatch.setattr(socket, "socket", fake_socket)

        with caplog.at_level(logging.WARNING, logger="netlib"):
            sock, chosen = open_endpoint([ipv6, ipv4])

        try:
            assert chosen is ipv4
            assert sock.family == socket.AF_INET
            assert "AF_INET6" in caplog.text
        finally:
            sock.close()

    def test_all_candidates_fail(self, monkeypatch):
        """Test that exhausting every candidate raises SystemCallError."""
        def fake_socket(*args, **kwargs):
            raise OSError(97, "Address family not supported by protocol")

        monkeypatch.setattr(socket, "socket", fake_socket)
        candidate = AddressInfo(socket.AF_INET, socket.SOCK_STREAM, 6, ("127.0.0.1", 80))

        with pytest.raises(SystemCallError) as info:
            open_endpoint([candidate])

        assert info.value.operation == "socket"
        assert info.value.errno == 97
