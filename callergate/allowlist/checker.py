"""Caller authorization for the media browser service.

AuthorizationChecker.is_caller_allowed() is the ONLY call the service's
connection handler needs. It answers "may this process browse?" from:

  1. the caller's UID (system and self are always trusted),
  2. the caller's single signing certificate, resolved by the platform,
  3. the package names the allow-list records for that certificate.

When a caller has a known certificate but an unregistered package name, an
INFO line carries the certificate in base64. Operators can paste it into the
allow-list XML as-is.
"""

from __future__ import annotations

import base64

from callergate.allowlist.loader import AllowTable
from callergate.models.decision import CallerRequest, Decision
from callergate.platform import PlatformContext, UnknownPackageError
from callergate.utils.logger import caller_context, get_logger

logger = get_logger(__name__)


def fingerprint_of(signature: bytes) -> str:
    """Base64 of the raw certificate bytes, on a single line."""
    return base64.b64encode(signature).decode("ascii")


class AuthorizationChecker:
    """Decides whether a calling package may connect.

    The allow-list is handed over once at construction and only read from
    then on, so one checker can serve concurrent connection attempts.
    """

    def __init__(self, table: AllowTable) -> None:
        self._table = table

    @property
    def table(self) -> AllowTable:
        return self._table

    def is_caller_allowed(
        self,
        context: PlatformContext,
        calling_package: str,
        calling_uid: int,
    ) -> bool:
        """Return False if the caller is not authorized to browse this service."""
        return self.evaluate(context, calling_package, calling_uid).allowed

    def evaluate(
        self,
        context: PlatformContext,
        calling_package: str,
        calling_uid: int,
    ) -> Decision:
        """Run the caller check and report which path decided it.

        Only UnknownPackageError from the resolver is turned into a denial;
        any other resolver error propagates.
        """
        with caller_context(calling_package, calling_uid):
            return self._evaluate(context, calling_package, calling_uid)

    def _evaluate(
        self,
        context: PlatformContext,
        calling_package: str,
        calling_uid: int,
    ) -> Decision:
        # Always allow calls from the platform itself and from this process.
        if context.identity.is_system(calling_uid) or context.identity.is_self(calling_uid):
            return Decision.ALLOW_PRIVILEGED

        try:
            signatures = context.signatures.resolve_signatures(calling_package)
        except UnknownPackageError:
            logger.warning("Package manager can't find package", package=calling_package)
            return Decision.DENY_UNKNOWN_PACKAGE

        if len(signatures) != 1:
            logger.warning(
                "Caller does not have exactly one signing certificate",
                package=calling_package,
                signature_count=len(signatures),
            )
            return Decision.DENY_SIGNATURE_COUNT

        request = CallerRequest(
            package_name=calling_package,
            uid=calling_uid,
            fingerprint=fingerprint_of(signatures[0]),
        )
        return self._match(request)

    def _match(self, request: CallerRequest) -> Decision:
        valid_callers = self._table.lookup(request.fingerprint)
        if not valid_callers:
            logger.debug(
                "Signature for caller is not valid",
                package=request.package_name,
                certificate=request.fingerprint,
            )
            if not self._table:
                logger.warning(
                    "The list of valid certificates is empty. Either the allow-list "
                    "file is empty or there was an error while reading it. "
                    "Check previous log messages."
                )
                return Decision.DENY_EMPTY_ALLOWLIST
            return Decision.DENY_CERTIFICATE_UNKNOWN

        for info in valid_callers:
            if info.package_name == request.package_name:
                logger.debug(
                    "Valid caller",
                    name=info.name,
                    package=info.package_name,
                    release=info.release,
                )
                return Decision.ALLOW_MATCHED

        expected_packages = " ".join(str(info.package_name) for info in valid_callers)
        logger.info(
            "Caller has a valid certificate, but its package doesn't match any "
            "expected package for the given certificate",
            package=request.package_name,
            expected_packages=expected_packages,
            certificate=request.fingerprint,
        )
        return Decision.DENY_PACKAGE_MISMATCH
