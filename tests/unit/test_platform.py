"""Tests for the platform capabilities and the Decision model.

Tests:
  - StaticSignatureResolver register / resolve / unknown package
  - PosixProcessIdentity system and self checks
  - Protocol conformance (runtime_checkable)
  - Decision.allowed projection
"""

from __future__ import annotations

import os

import pytest

from callergate.constants import SYSTEM_UID
from callergate.models.decision import CallerRequest, Decision
from callergate.platform import (
    PlatformContext,
    PosixProcessIdentity,
    ProcessIdentity,
    SignatureResolver,
    StaticSignatureResolver,
    UnknownPackageError,
)


class TestStaticSignatureResolver:
    def test_resolves_registered_package(self):
        resolver = StaticSignatureResolver()
        resolver.register("com.example", b"cert")
        assert list(resolver.resolve_signatures("com.example")) == [b"cert"]

    def test_initial_mapping(self):
        resolver = StaticSignatureResolver({"com.a": [b"1", b"2"]})
        assert list(resolver.resolve_signatures("com.a")) == [b"1", b"2"]

    def test_register_replaces(self):
        resolver = StaticSignatureResolver({"com.a": [b"1"]})
        resolver.register("com.a", b"2")
        assert list(resolver.resolve_signatures("com.a")) == [b"2"]

    def test_unknown_package_raises(self):
        with pytest.raises(UnknownPackageError) as exc_info:
            StaticSignatureResolver().resolve_signatures("com.missing")
        assert exc_info.value.package_name == "com.missing"
        assert "com.missing" in str(exc_info.value)

    def test_unknown_package_is_lookup_error(self):
        assert issubclass(UnknownPackageError, LookupError)

    def test_satisfies_protocol(self):
        assert isinstance(StaticSignatureResolver(), SignatureResolver)


class TestPosixProcessIdentity:
    def test_defaults(self):
        identity = PosixProcessIdentity()
        assert identity.system_uid == SYSTEM_UID == 1000
        assert identity.own_uid == os.getuid()

    def test_is_system(self):
        identity = PosixProcessIdentity(system_uid=1000, own_uid=5000)
        assert identity.is_system(1000)
        assert not identity.is_system(5000)

    def test_is_self(self):
        identity = PosixProcessIdentity(system_uid=1000, own_uid=5000)
        assert identity.is_self(5000)
        assert not identity.is_self(1000)

    def test_satisfies_protocol(self):
        assert isinstance(PosixProcessIdentity(), ProcessIdentity)


class TestPlatformContext:
    def test_default_identity(self):
        context = PlatformContext(signatures=StaticSignatureResolver())
        assert isinstance(context.identity, PosixProcessIdentity)


class TestDecision:
    @pytest.mark.parametrize("decision", [Decision.ALLOW_PRIVILEGED, Decision.ALLOW_MATCHED])
    def test_allow_values(self, decision):
        assert decision.allowed is True

    @pytest.mark.parametrize("decision", [
        Decision.DENY_UNKNOWN_PACKAGE,
        Decision.DENY_SIGNATURE_COUNT,
        Decision.DENY_CERTIFICATE_UNKNOWN,
        Decision.DENY_EMPTY_ALLOWLIST,
        Decision.DENY_PACKAGE_MISMATCH,
    ])
    def test_deny_values(self, decision):
        assert decision.allowed is False

    def test_string_value(self):
        assert Decision.DENY_EMPTY_ALLOWLIST == "DENY_EMPTY_ALLOWLIST"

    def test_caller_request_is_immutable(self):
        request = CallerRequest(package_name="com.a", uid=10001, fingerprint="QUJDRA==")
        with pytest.raises(AttributeError):
            request.uid = 0  # type: ignore[misc]
