"""callergate: signing-certificate allow-list for media browser callers.

Public API:
    build_checker        : load settings + allow-list, return an AuthorizationChecker
    AuthorizationChecker : is_caller_allowed(context, package, uid) -> bool
    PlatformContext      : signature resolver + process identity handed to the check
"""
from callergate.allowlist import AllowTable, AuthorizationChecker, CertificateEntry
from callergate.models.decision import Decision
from callergate.platform import (
    PlatformContext,
    PosixProcessIdentity,
    StaticSignatureResolver,
    UnknownPackageError,
)
from callergate.validator import build_checker, default_context

__all__ = [
    "AllowTable",
    "AuthorizationChecker",
    "CertificateEntry",
    "Decision",
    "PlatformContext",
    "PosixProcessIdentity",
    "StaticSignatureResolver",
    "UnknownPackageError",
    "build_checker",
    "default_context",
]
