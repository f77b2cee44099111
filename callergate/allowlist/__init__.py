"""callergate allow-list: certificate table and caller check.

Public API:
    CertificateEntry     : single allow-list record
    AllowTable           : read-only fingerprint → entries map
    AllowListLoader      : builds an AllowTable from the allow-list XML
    AuthorizationChecker : decides whether a calling package may connect
"""
from callergate.allowlist.checker import AuthorizationChecker, fingerprint_of
from callergate.allowlist.loader import (
    AllowListLoader,
    AllowTable,
    CertificateEntry,
    ConfigLoadError,
    load_allowlist,
    load_allowlist_resource,
    normalize_fingerprint,
)

__all__ = [
    "AllowListLoader",
    "AllowTable",
    "AuthorizationChecker",
    "CertificateEntry",
    "ConfigLoadError",
    "fingerprint_of",
    "load_allowlist",
    "load_allowlist_resource",
    "normalize_fingerprint",
]
