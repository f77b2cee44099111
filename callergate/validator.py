"""Service-start wiring for the caller check.

build_checker() is the one initialization step a hosting media browser
service runs before accepting connections:

  1. load_config()            → settings (file + env overrides)
  2. configure_logging()      → structlog level/renderer from settings
  3. AllowListLoader          → AllowTable from config.allowlist.path, or the
                                packaged resource config.allowlist.resource
  4. AuthorizationChecker     → holds the table for the service lifetime

Usage:
    checker = build_checker()
    context = default_context(package_manager_resolver)
    ...
    if not checker.is_caller_allowed(context, client_package, client_uid):
        return None  # refuse the browse session
"""

from __future__ import annotations

from typing import Optional

from callergate.allowlist.checker import AuthorizationChecker
from callergate.allowlist.loader import AllowListLoader
from callergate.config import Config, load_config
from callergate.platform import PlatformContext, PosixProcessIdentity, SignatureResolver
from callergate.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def build_checker(
    config: Optional[Config] = None,
    loader: Optional[AllowListLoader] = None,
    configure_logs: bool = True,
) -> AuthorizationChecker:
    """Load settings and the allow-list, and return a ready AuthorizationChecker.

    Never fails on a bad allow-list (the checker then denies every
    non-privileged caller). An invalid settings file still raises
    SystemExit(1) from load_config().
    """
    if config is None:
        config = load_config()
    if configure_logs:
        configure_logging(log_level=config.logging.level, json_output=config.logging.json)

    loader = loader or AllowListLoader()
    if config.allowlist.path:
        table = loader.load(config.allowlist.path)
    else:
        table = loader.load_resource(config.allowlist.resource)

    if not table:
        logger.warning(
            "No allowed callers loaded; only the platform and this process can connect",
            allowlist_path=config.allowlist.path,
            allowlist_resource=config.allowlist.resource,
        )
    else:
        logger.info(
            "Caller check ready",
            certificates=len(table),
            entries=table.entry_count,
        )
    return AuthorizationChecker(table)


def default_context(
    resolver: SignatureResolver,
    config: Optional[Config] = None,
) -> PlatformContext:
    """PlatformContext for this process, trusting config.platform.system_uid."""
    system_uid = (config or Config.defaults()).platform.system_uid
    return PlatformContext(
        signatures=resolver,
        identity=PosixProcessIdentity(system_uid=system_uid),
    )
