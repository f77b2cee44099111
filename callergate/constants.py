"""Shared constants for callergate.

Element and attribute names of the allow-list document, platform identity
defaults and the names of the packaged resources live here. Other modules
import them rather than repeating literals.
"""

import os

# ─── Allow-list document ──────────────────────────────────────────────────────

# Tag of each allow-list record in the XML document.
SIGNING_CERTIFICATE_TAG: str = "signing_certificate"

# Attribute names on <signing_certificate>.
ATTR_NAME: str = "name"
ATTR_PACKAGE: str = "package"
ATTR_RELEASE: str = "release"

# Attribute values read as True for release="...". Anything else is False.
TRUE_VALUES: frozenset[str] = frozenset({"true", "1"})

# ─── Packaged resources ───────────────────────────────────────────────────────

# Package holding the bundled allow-list XML.
RESOURCE_PACKAGE: str = "callergate.resources"

# Default allow-list resource name inside RESOURCE_PACKAGE.
DEFAULT_ALLOWLIST_RESOURCE: str = "allowed_media_browser_callers.xml"

# ─── Platform identity ────────────────────────────────────────────────────────

# UID of the platform's system server (android.os.Process.SYSTEM_UID).
SYSTEM_UID: int = 1000

# ─── Settings file ────────────────────────────────────────────────────────────

# Default settings search paths (CALLERGATE_CONFIG env var prepended at runtime)
DEFAULT_CONFIG_PATHS: list[str] = [
    ".callergate/config.yaml",
    os.path.expanduser("~/.callergate/config.yaml"),
]
