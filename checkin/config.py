"""
config.py - Configuration Management
=====================================
This module handles loading and validating configuration from environment variables.
It reads settings from a .env file and makes them available to the rest of the application.

Environment Variables Used:
---------------------------
- CHECKIN_BASE_URL       : (Optional) Base URL of the check-in API (default: "https://api.xllm2.com")
- CHECKIN_MODE           : (Optional) Credential model, "token" or "wallet" (default: "token")
- CHECKIN_TOKEN_FILE     : (Optional) Path of the name:token file (default: "token.txt")
- CHECKIN_WALLET_FILE    : (Optional) Path of the name:privateKey file (default: "wallets.txt")
- CHECKIN_INTERVAL_HOURS : (Optional) Hours between two check-in cycles (default: 24)
- CHECKIN_TIMEOUT_SEC    : (Optional) Request timeout in seconds (default: none, transport default)
- CHECKIN_USER_AGENT     : (Optional) User-Agent header sent with every request
- CHECKIN_COUNTDOWN      : (Optional) Show the live countdown while waiting (default: true)

Example .env file:
------------------
CHECKIN_MODE=token
CHECKIN_TOKEN_FILE=token.txt
CHECKIN_INTERVAL_HOURS=24
"""

from dataclasses import dataclass
import os
from pathlib import Path
from dotenv import load_dotenv


DEFAULT_BASE_URL = "https://api.xllm2.com"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/134.0.6787.75 Safari/537.36"
)

MODES = ("token", "wallet")


# =============================================================================
# SETTINGS DATACLASS
# =============================================================================

@dataclass
class Settings:
    """Container for all application configuration values."""

    # Base URL of the API; endpoint paths are appended to it
    base_url: str = DEFAULT_BASE_URL

    # Which credential model to run: "token" (bearer) or "wallet" (signature)
    mode: str = "token"

    # Credential files, one account per line
    token_file: str = "token.txt"
    wallet_file: str = "wallets.txt"

    # Hours to wait between the end of one cycle and the start of the next
    interval_hours: float = 24.0

    # None leaves the timeout to requests (i.e. wait indefinitely)
    timeout_sec: float | None = None

    user_agent: str = DEFAULT_USER_AGENT

    # Render the "next run in ..." line once per second while waiting
    countdown: bool = True

    def credential_file(self) -> str:
        """Return the credential file path for the configured mode."""
        return self.wallet_file if self.mode == "wallet" else self.token_file


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _clean(v: str | None) -> str | None:
    """
    Clean and normalize an environment variable value.

    Examples:
        _clean('  hello  ')     -> 'hello'
        _clean('"quoted"')      -> 'quoted'
        _clean('')              -> None
        _clean(None)            -> None
    """
    if v is None:
        return None

    v = v.strip()

    # Remove surrounding quotes if present
    if len(v) >= 2 and ((v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'"))):
        v = v[1:-1]

    return v if v else None


def _flag(v: str | None, default: bool) -> bool:
    """Interpret a yes/no style environment value."""
    v = _clean(v)
    if v is None:
        return default
    return v.lower() in ("1", "true", "yes", "on")


def normalize_base_url(base: str) -> str:
    """Add a scheme if missing and drop the trailing slash."""
    if not base.startswith("http"):
        base = "https://" + base
    return base.rstrip("/")


# =============================================================================
# MAIN CONFIGURATION LOADER
# =============================================================================

def load_settings() -> Settings:
    """
    Load application configuration from environment variables.

    This function:
    1. Finds and loads the .env file from the project root
    2. Reads all CHECKIN_* environment variables
    3. Cleans and validates the values
    4. Returns a Settings object with all configuration

    Returns:
        Settings: A dataclass containing all configuration values

    Raises:
        RuntimeError: If CHECKIN_MODE is not "token" or "wallet"
        ValueError: If a numeric variable cannot be parsed
    """
    # The .env file lives in the project root (one level up from checkin/)
    root_env = Path(__file__).resolve().parents[1] / ".env"
    load_dotenv(dotenv_path=root_env)

    mode = (_clean(os.getenv("CHECKIN_MODE")) or "token").lower()
    if mode not in MODES:
        raise RuntimeError(
            f"CHECKIN_MODE must be one of {', '.join(MODES)}, got {mode!r}. "
            "Please fix it in your .env file."
        )

    timeout = _clean(os.getenv("CHECKIN_TIMEOUT_SEC"))

    return Settings(
        base_url=normalize_base_url(_clean(os.getenv("CHECKIN_BASE_URL")) or DEFAULT_BASE_URL),
        mode=mode,

        # Credential files
        token_file=_clean(os.getenv("CHECKIN_TOKEN_FILE")) or "token.txt",
        wallet_file=_clean(os.getenv("CHECKIN_WALLET_FILE")) or "wallets.txt",

        # Scheduling
        interval_hours=float(_clean(os.getenv("CHECKIN_INTERVAL_HOURS")) or "24"),
        countdown=_flag(os.getenv("CHECKIN_COUNTDOWN"), True),

        # Transport
        timeout_sec=float(timeout) if timeout else None,
        user_agent=_clean(os.getenv("CHECKIN_USER_AGENT")) or DEFAULT_USER_AGENT,
    )
