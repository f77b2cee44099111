"""Platform capabilities consumed by the authorization check.

The checker never talks to a package manager or the process table directly.
It goes through two small protocols so that it can be driven by any runtime
(or by a test double):

    SignatureResolver:       package name → raw signing certificate blobs
    ProcessIdentity:         "is this UID the system?" / "is this UID me?"

Implementations shipped here:
    StaticSignatureResolver: in-memory registry (tests, embedding hosts)
    PosixProcessIdentity:    compares against a fixed system UID and os.getuid()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence, runtime_checkable

from callergate.constants import SYSTEM_UID
from callergate.utils.logger import get_logger

logger = get_logger(__name__)


# ─── Exceptions ───────────────────────────────────────────────────────────────


class UnknownPackageError(LookupError):
    """Raised by a SignatureResolver when the package is not installed."""

    def __init__(self, package_name: str) -> None:
        super().__init__(f"Package not found: {package_name}")
        self.package_name = package_name


# ─── Protocols ────────────────────────────────────────────────────────────────


@runtime_checkable
class SignatureResolver(Protocol):
    """Resolves the signing certificates of an installed package."""

    def resolve_signatures(self, package_name: str) -> Sequence[bytes]:
        """Return the raw signing certificate blobs for package_name.

        Raises:
            UnknownPackageError: The package is not known to the platform.
        """
        ...


@runtime_checkable
class ProcessIdentity(Protocol):
    """Classifies a calling process UID."""

    def is_system(self, uid: int) -> bool:
        ...

    def is_self(self, uid: int) -> bool:
        ...


# ─── Implementations ──────────────────────────────────────────────────────────


class StaticSignatureResolver:
    """In-memory package → signatures registry.

    Usage:
        resolver = StaticSignatureResolver()
        resolver.register("com.example.car", cert_der_bytes)
    """

    def __init__(self, packages: Optional[dict[str, Sequence[bytes]]] = None) -> None:
        self._packages: dict[str, tuple[bytes, ...]] = {}
        for package_name, signatures in (packages or {}).items():
            self.register(package_name, *signatures)

    def register(self, package_name: str, *signatures: bytes) -> None:
        """Record (or replace) the signatures installed for package_name."""
        self._packages[package_name] = tuple(signatures)
        logger.debug(
            "Registered package signatures",
            package=package_name,
            signature_count=len(signatures),
        )

    def resolve_signatures(self, package_name: str) -> Sequence[bytes]:
        try:
            return self._packages[package_name]
        except KeyError:
            raise UnknownPackageError(package_name) from None


@dataclass(frozen=True)
class PosixProcessIdentity:
    """ProcessIdentity backed by a fixed system UID and this process's UID."""

    system_uid: int = SYSTEM_UID
    own_uid: int = field(default_factory=os.getuid)

    def is_system(self, uid: int) -> bool:
        return uid == self.system_uid

    def is_self(self, uid: int) -> bool:
        return uid == self.own_uid


@dataclass(frozen=True)
class PlatformContext:
    """The capabilities an authorization check needs from its host."""

    signatures: SignatureResolver
    identity: ProcessIdentity = field(default_factory=PosixProcessIdentity)
