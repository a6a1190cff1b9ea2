"""clawdash backend configuration."""
import os
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    value = os.getenv(name)
    if not value or not value.strip():
        return default
    return Path(value.strip()).expanduser()


# Project root (one level up from clawdash/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent
HOME_DIR = Path.home()

# Bundled placeholder snapshot
PLACEHOLDER_PATH = Path(__file__).resolve().parent / "data" / "dashboard-data.json"

# Dashboard page assets served under /static
STATIC_DIR = _env_path("CLAWDASH_STATIC_DIR", PROJECT_ROOT / "static")

# Generated snapshot locations
DATA_DIR = _env_path("CLAWDASH_DATA_DIR", PROJECT_ROOT / "data")
BUILD_DIR = _env_path("CLAWDASH_BUILD_DIR", PROJECT_ROOT / "build")
GENERATED_SNAPSHOT_NAME = "generated-data.json"
GENERATED_SNAPSHOT_PATH = DATA_DIR / GENERATED_SNAPSHOT_NAME
BUILD_SNAPSHOT_PATH = BUILD_DIR / GENERATED_SNAPSHOT_NAME
HOME_SNAPSHOT_PATH = HOME_DIR / "clawd" / "openclaw-dashboard" / "data" / GENERATED_SNAPSHOT_NAME

# (label, path) pairs, probed in order
SNAPSHOT_CANDIDATES: list[tuple[str, Path]] = [
    ("Production build", BUILD_SNAPSHOT_PATH),
    ("Local dev / post-build copy", GENERATED_SNAPSHOT_PATH),
    ("Home directory fallback", HOME_SNAPSHOT_PATH),
]
USE_GENERATED_SNAPSHOT = _env_bool("CLAWDASH_USE_GENERATED_SNAPSHOT", True)
SNAPSHOT_MAX_AGE_HOURS = _env_float("CLAWDASH_SNAPSHOT_MAX_AGE_HOURS", 24.0)
REQUIRE_LIVE_DATA = _env_bool("REQUIRE_LIVE_DATA", False)

# Upstream sources
OPENCLAW_BIN = _env_path("CLAWDASH_OPENCLAW_BIN", HOME_DIR / ".openclaw" / "bin" / "openclaw")
AGENTS_DIR = _env_path("CLAWDASH_AGENTS_DIR", HOME_DIR / "clawd" / "agents")
REPORTS_DIR = _env_path("CLAWDASH_REPORTS_DIR", HOME_DIR / "clawd" / "outputs" / "betfair-racecards")
CLI_TIMEOUT_SECONDS = _env_float("CLAWDASH_CLI_TIMEOUT_SECONDS", 12.0)

GITHUB_TOKEN = os.getenv("GITHUB_TOKEN", "")
GITHUB_GRAPHQL_URL = os.getenv("CLAWDASH_GITHUB_GRAPHQL_URL", "https://api.github.com/graphql")
GITHUB_PROJECT_OWNER = os.getenv("CLAWDASH_GITHUB_PROJECT_OWNER", "")
GITHUB_PROJECT_NUMBER = _env_int("CLAWDASH_GITHUB_PROJECT_NUMBER", 2)
GITHUB_TIMEOUT_SECONDS = _env_float("CLAWDASH_GITHUB_TIMEOUT_SECONDS", 10.0)

DEFAULT_AGENT_MODEL = "anthropic/claude-haiku-4-5"

# Auth
DASHBOARD_USERNAME = os.getenv("DASHBOARD_USERNAME", "admin")
DASHBOARD_PASSWORD = os.getenv("DASHBOARD_PASSWORD", "openclaw")
AUTH_REALM = "OpenClaw Dashboard"

# Observability
OTEL_ENABLED = _env_bool("CLAWDASH_OTEL_ENABLED", False)
OTEL_ENDPOINT = os.getenv("CLAWDASH_OTEL_ENDPOINT", "http://localhost:4318")
OTEL_SERVICE_NAME = os.getenv("CLAWDASH_OTEL_SERVICE_NAME", "clawdash-backend")
PROM_PORT = _env_int("CLAWDASH_PROM_PORT", 0)

# Server settings
HOST = os.getenv("CLAWDASH_HOST", "0.0.0.0")
PORT = _env_int("CLAWDASH_PORT", 8000)
TZ_NAME = os.getenv("CLAWDASH_TZ", "UTC")


@dataclass(frozen=True)
class DashboardPolicy:
    """Tunables injected into the reconciler, report parser and trading source."""

    token_cost_rate: float = 0.0000263
    report_window_date: date | None = None
    max_qualified_records: int = 2

    @property
    def window_date(self) -> date:
        if self.report_window_date is not None:
            return self.report_window_date
        return datetime.now(ZoneInfo(TZ_NAME)).date()

    @property
    def report_period(self) -> str:
        """Monthly report identifier, e.g. ``2026-02``."""
        return self.window_date.strftime("%Y-%m")


def _parse_window_date(raw: str | None) -> date | None:
    token = (raw or "").strip()
    if not token:
        return None
    try:
        return date.fromisoformat(token)
    except ValueError:
        return None


def load_policy() -> DashboardPolicy:
    return DashboardPolicy(
        token_cost_rate=_env_float("CLAWDASH_TOKEN_COST_RATE", 0.0000263),
        report_window_date=_parse_window_date(os.getenv("CLAWDASH_REPORT_WINDOW_DATE")),
        max_qualified_records=max(0, _env_int("CLAWDASH_MAX_QUALIFIED_RECORDS", 2)),
    )
