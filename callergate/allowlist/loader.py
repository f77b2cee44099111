"""Allow-list loader for callergate.

Reads the trusted signing certificates from an XML document of the form:

    <signing_certificate name="Android Auto" package="com.google.android.projection.gearhead"
                         release="true">
        MIIEQzCCAyugAwIBAgIJAMLgh0ZkSjCNMA0GCSqGSIb3DQEBBAUAMHQxCzAJBgNV
        ...
    </signing_certificate>

The certificate text is the base64 encoding of the signer's certificate.
All whitespace inside it is ignored, so it may be wrapped for readability.

The table is built once and never changes afterwards. A document that cannot
be read or parsed yields an empty table instead of an exception. Every
non-privileged caller is then denied, and the checker says why in its logs.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from importlib import resources
from os import PathLike
from types import MappingProxyType
from typing import BinaryIO, Optional, Sequence, Union

from callergate.constants import (
    ATTR_NAME,
    ATTR_PACKAGE,
    ATTR_RELEASE,
    DEFAULT_ALLOWLIST_RESOURCE,
    RESOURCE_PACKAGE,
    SIGNING_CERTIFICATE_TAG,
    TRUE_VALUES,
)
from callergate.utils.logger import get_logger

logger = get_logger(__name__)

AllowlistSource = Union[str, "PathLike[str]", BinaryIO]


# ─── Exceptions ───────────────────────────────────────────────────────────────


class ConfigLoadError(Exception):
    """The allow-list document could not be read or is not well-formed XML."""


# ─── Data model ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CertificateEntry:
    """A single allow-list record.

    Fields:
        name:          Human-readable label of the caller.
        package_name:  Package that is expected to be signed with the certificate.
        release:       True for a release signing key, False for a debug key.
    """

    name: Optional[str]
    package_name: Optional[str]
    release: bool = False


class AllowTable(Mapping[str, tuple[CertificateEntry, ...]]):
    """Read-only map of certificate fingerprint → entries, in document order.

    Several packages may share one certificate (e.g. release and debug
    variants), so each fingerprint maps to a tuple of entries.
    """

    def __init__(self, entries: Optional[Mapping[str, Sequence[CertificateEntry]]] = None) -> None:
        self._entries = MappingProxyType(
            {fingerprint: tuple(infos) for fingerprint, infos in (entries or {}).items()}
        )

    def __getitem__(self, fingerprint: str) -> tuple[CertificateEntry, ...]:
        return self._entries[fingerprint]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AllowTable({len(self)} certificates, {self.entry_count} entries)"

    @property
    def entry_count(self) -> int:
        return sum(len(infos) for infos in self._entries.values())

    def lookup(self, fingerprint: str) -> tuple[CertificateEntry, ...]:
        """Entries registered for fingerprint, or () if it is unknown."""
        return self._entries.get(fingerprint, ())


# ─── Loader ──────────────────────────────────────────────────────────────────


class AllowListLoader:
    """Builds an AllowTable from an allow-list XML document.

    Usage (at service start):
        table = AllowListLoader().load_resource()
        checker = AuthorizationChecker(table)

    load() and load_resource() never raise for a bad document; they log the
    failure and return an empty table.
    """

    def __init__(self, tag: str = SIGNING_CERTIFICATE_TAG) -> None:
        self._tag = tag

    def load(self, source: AllowlistSource) -> AllowTable:
        """Load an allow-list from a file path or a binary stream.

        A stream passed in is left open; a path is opened and closed here.
        """
        try:
            if hasattr(source, "read"):
                certificates = self._read_certificates(source)  # type: ignore[arg-type]
            else:
                with open(source, "rb") as fh:  # type: ignore[arg-type]
                    certificates = self._read_certificates(fh)
        except (ConfigLoadError, OSError) as exc:
            logger.error(
                "Could not read allowed callers from XML; allow-list is empty",
                source=_describe(source),
                error=str(exc),
            )
            return AllowTable()

        table = AllowTable(certificates)
        logger.debug(
            "Allow-list loaded",
            source=_describe(source),
            certificates=len(table),
            entries=table.entry_count,
        )
        return table

    def load_resource(
        self,
        resource: str = DEFAULT_ALLOWLIST_RESOURCE,
        package: str = RESOURCE_PACKAGE,
    ) -> AllowTable:
        """Load an allow-list shipped as a package resource."""
        try:
            traversable = resources.files(package).joinpath(resource)
            fh = traversable.open("rb")
        except (ModuleNotFoundError, OSError) as exc:
            logger.error(
                "Could not open allowed callers resource; allow-list is empty",
                package=package,
                resource=resource,
                error=str(exc),
            )
            return AllowTable()
        with fh:
            return self.load(fh)

    def _read_certificates(self, stream: BinaryIO) -> dict[str, list[CertificateEntry]]:
        certificates: dict[str, list[CertificateEntry]] = {}
        try:
            for _event, elem in ET.iterparse(stream, events=("end",)):
                if elem.tag != self._tag:
                    continue

                name = elem.get(ATTR_NAME)
                package_name = elem.get(ATTR_PACKAGE)
                release = _parse_bool(elem.get(ATTR_RELEASE))
                certificate = normalize_fingerprint("".join(elem.itertext()))
                elem.clear()

                if not certificate:
                    logger.warning(
                        "Allowed caller has no certificate text",
                        name=name,
                        package=package_name,
                    )

                info = CertificateEntry(name=name, package_name=package_name, release=release)
                logger.debug(
                    "Adding allowed caller",
                    name=info.name,
                    package=info.package_name,
                    release=info.release,
                    certificate=certificate,
                )
                certificates.setdefault(certificate, []).append(info)
        except ET.ParseError as exc:
            raise ConfigLoadError(f"Malformed allow-list XML: {exc}") from exc
        return certificates


# ─── Helpers ──────────────────────────────────────────────────────────────────


def normalize_fingerprint(text: str) -> str:
    """Remove every whitespace character (spaces, tabs, newlines) from text."""
    return "".join(text.split())


def load_allowlist(source: AllowlistSource) -> AllowTable:
    """Shorthand for AllowListLoader().load(source)."""
    return AllowListLoader().load(source)


def load_allowlist_resource(
    resource: str = DEFAULT_ALLOWLIST_RESOURCE,
    package: str = RESOURCE_PACKAGE,
) -> AllowTable:
    """Shorthand for AllowListLoader().load_resource(resource, package)."""
    return AllowListLoader().load_resource(resource, package)


def _parse_bool(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in TRUE_VALUES


def _describe(source: AllowlistSource) -> str:
    if hasattr(source, "read"):
        return str(getattr(source, "name", None) or type(source).__name__)
    return str(source)
