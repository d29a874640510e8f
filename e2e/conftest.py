"""
Shared configuration and utilities for the Numerino API E2E phases.

Configuration comes from the environment. A `.env` file at the project root
is read as a fallback; values already exported in the shell always win.

    TEST_BASE_URL          Backend base URL including the /api prefix
    TEST_TIMEOUT           Per-phase timeout for the runner (ms)
    TEST_REQUEST_TIMEOUT   Per-request timeout (seconds)
    TEST_RETRIES           Connection retries per request
    TEST_INSTITUTION_ID    Fallback institution for registrations
    LOG_LEVEL              info | debug
    NO_COLOR               Disable ANSI colors

When collected by pytest, the live phase modules are skipped unless RUN_E2E=1.
"""

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_FILE = PROJECT_ROOT / ".env"


def _read_env_file(env_path=ENV_FILE):
    """Parse KEY=VALUE lines from an env file (missing file -> empty)."""
    values = {}
    env_file = Path(env_path)
    if not env_file.exists():
        return values
    with open(env_file) as f:
        for line in f:
            line = line.strip()
            if "=" in line and not line.startswith("#"):
                key, value = line.split("=", 1)
                values[key.strip()] = value.strip().strip('"').strip("'")
    return values


_ENV_FILE_VALUES = _read_env_file()


def env(name, default=None):
    """Read a setting from the process environment, then the .env file."""
    value = os.getenv(name)
    if value is None or value == "":
        value = _ENV_FILE_VALUES.get(name)
    return default if value is None or value == "" else value


def env_int(name, default):
    value = env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


# ============================================
# Configuration
# ============================================

DEFAULT_BASE_URL = "http://localhost:8080/api"

# Runner timeout per phase (ms)
PHASE_TIMEOUT_MS = env_int("TEST_TIMEOUT", 60000)

# Test timeout per request (seconds)
TIMEOUT = env_int("TEST_REQUEST_TIMEOUT", 10)

# Connection-level retries
RETRIES = env_int("TEST_RETRIES", 2)

# Institution that already exists in the test database
INSTITUTION_ID = env_int("TEST_INSTITUTION_ID", 3)

LOG_LEVEL = env("LOG_LEVEL", "info").lower()

API_BASE = env("TEST_BASE_URL", DEFAULT_BASE_URL).rstrip("/")


# ============================================
# URL Helpers
# ============================================

def set_api_base(url):
    """Set the API base URL."""
    global API_BASE
    API_BASE = url.rstrip("/")


def get_api_base():
    """Get current API base URL."""
    return API_BASE


def is_debug():
    return LOG_LEVEL == "debug"


# ============================================
# Logging Helpers
# ============================================

class Colors:
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    MAGENTA = '\033[95m'
    CYAN = '\033[96m'
    BOLD = '\033[1m'
    END = '\033[0m'


if env("NO_COLOR"):
    for _attr in ("GREEN", "RED", "YELLOW", "BLUE", "MAGENTA", "CYAN", "BOLD", "END"):
        setattr(Colors, _attr, "")


DETAIL_LIMIT = 200


def truncate(text, limit=DETAIL_LIMIT):
    text = "" if text is None else str(text)
    return text[:limit] + ("..." if len(text) > limit else "")


def log_pass(name):
    print(f"  {Colors.GREEN}✅ {name}{Colors.END}")


def log_fail(name, error):
    print(f"  {Colors.RED}❌ {name}: {error}{Colors.END}")


def log_skip(name, reason):
    print(f"  {Colors.YELLOW}⏭️  {name}: {reason}{Colors.END}")


def log_section(name):
    print(f"\n{Colors.BOLD}{Colors.MAGENTA}=== {name} ==={Colors.END}")


def log_info(message):
    print(f"  {Colors.CYAN}ℹ️  {message}{Colors.END}")


def log_warn(message):
    print(f"  {Colors.YELLOW}⚠️  {message}{Colors.END}")


def log_request(method, url):
    print(f"  {Colors.BLUE}🔍 {method} {url}{Colors.END}")


def log_detail(label, text):
    """Print a labelled, truncated detail line (request/response bodies)."""
    if text:
        print(f"     {Colors.YELLOW}{label}:{Colors.END} {truncate(text)}")


# ============================================
# Pytest gate
# ============================================

def pytest_collection_modifyitems(config, items):
    """Skip the live phases unless RUN_E2E=1 (they need a running backend)."""
    if os.getenv("RUN_E2E", "0") == "1":
        return
    import pytest

    pkg_dir = Path(__file__).parent.resolve()
    skip = pytest.mark.skip(reason="E2E phases disabled; set RUN_E2E=1 to enable")
    for item in items:
        if Path(item.path).resolve().is_relative_to(pkg_dir):
            item.add_marker(skip)
