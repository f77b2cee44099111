"""Root test configuration for callergate.

Reconfigures structlog for the whole suite: DEBUG level, console rendering
and no logger caching. Without caching, structlog.testing.capture_logs()
sees every event, including those from module-level loggers.

Also clears the CALLERGATE_* environment variables so that a developer's
shell settings never leak into config tests.
"""

import pytest

from callergate.utils.logger import configure_logging


@pytest.fixture(autouse=True)
def structlog_for_tests() -> None:
    """Re-apply test logging before every test (build_checker() reconfigures it)."""
    configure_logging(log_level="DEBUG", json_output=False, cache_logger=False)


@pytest.fixture(autouse=True)
def clean_callergate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("CALLERGATE_CONFIG", "CALLERGATE_ALLOWLIST", "CALLERGATE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
