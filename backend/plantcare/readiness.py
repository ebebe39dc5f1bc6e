"""Readiness checks: config, packages, database, push configuration."""
import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from plantcare.infra.db.base import normalize_async_url

logger = logging.getLogger(__name__)

# Result: (passed: bool, message: str)
CheckResult = tuple[bool, str]
ChecksDict = dict[str, CheckResult]

REQUIRED_CHECKS = {"config", "packages", "database"}


def check_config() -> CheckResult:
    """Load settings and resolve the schedule timezone."""
    try:
        from plantcare.settings import get_settings
        s = get_settings()
        _ = s.database_url
        _ = s.schedule_tz
        return True, "ok"
    except Exception as e:
        return False, str(e)


def check_packages() -> CheckResult:
    """Import critical third-party modules."""
    missing = []
    for name in ("uvicorn", "sqlalchemy", "pywebpush", "jwt", "bcrypt"):
        try:
            __import__(name)
        except ImportError:
            missing.append(name)
    if missing:
        return False, f"missing: {', '.join(missing)}"
    return True, "ok"


async def _check_database_async(database_url: str) -> CheckResult:
    """Run a trivial query against the database."""
    try:
        engine = create_async_engine(normalize_async_url(database_url), pool_pre_ping=True)
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        await engine.dispose()
        return True, "ok"
    except Exception as e:
        return False, str(e)


def check_database() -> CheckResult:
    """Check database connectivity using settings.database_url."""
    try:
        from plantcare.settings import get_settings
        return asyncio.run(_check_database_async(get_settings().database_url))
    except Exception as e:
        return False, str(e)


def check_push() -> CheckResult:
    """Optional: VAPID keys. Reminders are skipped without them."""
    from plantcare.settings import get_settings
    if get_settings().push_enabled:
        return True, "ok"
    return False, "VAPID keys not configured"


def run_all_checks() -> ChecksDict:
    """Run all readiness checks (sync). Returns dict of check_name -> (passed, message)."""
    return {
        "config": check_config(),
        "packages": check_packages(),
        "database": check_database(),
        "push": check_push(),
    }


async def run_all_checks_async() -> ChecksDict:
    """Run all readiness checks from a running event loop (GET /ready)."""
    from plantcare.settings import get_settings
    db_result = await _check_database_async(get_settings().database_url)
    return {
        "config": check_config(),
        "packages": check_packages(),
        "database": db_result,
        "push": check_push(),
    }


def is_ready(checks: ChecksDict | None = None) -> tuple[bool, dict[str, str]]:
    """
    True if all required checks pass; ``push`` is informational only.
    Returns (ready, summary of name -> "ok" or the failure message).
    """
    if checks is None:
        checks = run_all_checks()
    summary = {name: msg for name, (_, msg) in checks.items()}
    ready = all(checks[n][0] for n in REQUIRED_CHECKS if n in checks)
    return ready, summary


if __name__ == "__main__":
    ready, summary = is_ready()
    for name, msg in summary.items():
        print(f"{name:10s} {msg}")
    raise SystemExit(0 if ready else 1)
