"""Authorization decision contracts.

Decision: which path of the caller check produced the verdict
CallerRequest: the per-check view of the caller, discarded after the check
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Decision(str, Enum):
    """Outcome of a single caller authorization check.

    Only ALLOW_* values grant access. The DENY_* values exist so that a
    caller-visible boolean can still be traced back to the reason it was
    refused.
    """

    ALLOW_PRIVILEGED = "ALLOW_PRIVILEGED"
    """Caller is the platform system process or this service itself."""
    ALLOW_MATCHED = "ALLOW_MATCHED"
    """Certificate and package name both matched an allow-list entry."""
    DENY_UNKNOWN_PACKAGE = "DENY_UNKNOWN_PACKAGE"
    """The platform could not resolve the calling package."""
    DENY_SIGNATURE_COUNT = "DENY_SIGNATURE_COUNT"
    """The calling package does not carry exactly one signing certificate."""
    DENY_CERTIFICATE_UNKNOWN = "DENY_CERTIFICATE_UNKNOWN"
    """The certificate is not in a populated allow-list."""
    DENY_EMPTY_ALLOWLIST = "DENY_EMPTY_ALLOWLIST"
    """Nothing was loaded into the allow-list."""
    DENY_PACKAGE_MISMATCH = "DENY_PACKAGE_MISMATCH"
    """The certificate is known but not for this package name."""

    @property
    def allowed(self) -> bool:
        return self in (Decision.ALLOW_PRIVILEGED, Decision.ALLOW_MATCHED)


@dataclass(frozen=True)
class CallerRequest:
    """A caller whose signature has been resolved and fingerprinted."""

    package_name: str
    uid: int
    fingerprint: str
