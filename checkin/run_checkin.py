"""
run_checkin.py - Main Application Entry Point
==============================================
This is the main script that runs the daily check-in for every account.

What it does:
-------------
1. Loads configuration from environment variables (.env file)
2. Reads the credential file (tokens or wallets)
3. Checks in each account, one at a time, in file order
4. Waits 24 hours and starts again

Usage:
------
    python -m checkin.run_checkin
    python -m checkin.run_checkin --mode wallet --file wallets.txt
    python -m checkin.run_checkin --once --debug

Command Line Options:
---------------------
    --mode          : "token" or "wallet" (default: CHECKIN_MODE or "token")
    --file          : Credential file (default: CHECKIN_TOKEN_FILE / CHECKIN_WALLET_FILE)
    --once          : Run a single cycle and exit
    --no-countdown  : Don't print the countdown while waiting
    --debug         : Enable debug logging for troubleshooting
"""

import sys
import logging
import argparse
from datetime import timedelta
from typing import List, Optional

from .config import MODES, Settings, load_settings
from .http_client import HttpClient
from .loader import load_token_accounts, load_wallet_accounts
from .processor import (
    CheckInOutcome,
    OutcomeStatus,
    check_in_token_account,
    check_in_wallet_account,
    log_outcome,
)
from .scheduler import Countdown, Scheduler


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

LOG_LEVEL = logging.INFO

# Line printed after every account
SEPARATOR = "─" * 40

BANNER = r"""
  ____        _ _          ____ _               _      ___
 |  _ \  __ _(_) |_   _   / ___| |__   ___  ___| | __ |_ _|_ __
 | | | |/ _` | | | | | | | |   | '_ \ / _ \/ __| |/ /  | || '_ \
 | |_| | (_| | | | |_| | | |___| | | |  __/ (__|   <   | || | | |
 |____/ \__,_|_|_|\__, |  \____|_| |_|\___|\___|_|\_\ |___|_| |_|
                  |___/
"""


# =============================================================================
# LOGGING SETUP
# =============================================================================

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%H:%M:%S'
)

logger = logging.getLogger(__name__)


# =============================================================================
# CYCLE
# =============================================================================

def run_cycle(client: HttpClient, settings: Settings, credential_file: Optional[str] = None) -> Optional[List[CheckInOutcome]]:
    """
    Load the credential file and check in every account once, in file order.

    Args:
        client: The HTTP client for making API calls
        settings: Application settings (selects token or wallet mode)
        credential_file: Overrides the file from settings

    Returns:
        One outcome per processed account, or None if the credential file
        could not be read (the cycle is abandoned)
    """
    path = credential_file or settings.credential_file()

    if settings.mode == "wallet":
        load, check_in = load_wallet_accounts, check_in_wallet_account
    else:
        load, check_in = load_token_accounts, check_in_token_account

    # The file is read fresh each cycle so edits apply without a restart
    try:
        accounts = load(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading {path}: {e}")
        return None

    if not accounts:
        logger.error(f"No accounts found in {path}")
        return []

    outcomes = []
    for i, account in enumerate(accounts):
        outcome = check_in(client, account)
        log_outcome(account.display_name, outcome)
        outcomes.append(outcome)

        if i < len(accounts) - 1:
            logger.info(f"Next account: {accounts[i + 1].display_name}")
        else:
            logger.info("All accounts processed.")
        print(SEPARATOR)

    succeeded = sum(1 for o in outcomes if o.status is OutcomeStatus.SUCCESS)
    already = sum(1 for o in outcomes if o.status is OutcomeStatus.ALREADY_CHECKED_IN)
    failed = len(outcomes) - succeeded - already
    logger.info(f"Cycle summary: {succeeded} checked in, {already} already, {failed} failed")

    return outcomes


# =============================================================================
# COMMAND LINE ARGUMENT PARSING
# =============================================================================

def parse_arguments(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Daily check-in for every account in a credential file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m checkin.run_checkin
  python -m checkin.run_checkin --mode wallet --file wallets.txt
  python -m checkin.run_checkin --once --debug
        """
    )

    parser.add_argument(
        '--mode',
        choices=MODES,
        default=None,
        help='Credential model (default: CHECKIN_MODE or token)'
    )

    parser.add_argument(
        '--file',
        default=None,
        help='Credential file, one name:secret per line'
    )

    parser.add_argument(
        '--once',
        action='store_true',
        help='Run a single cycle and exit'
    )

    parser.add_argument(
        '--no-countdown',
        action='store_true',
        help="Don't show the countdown while waiting"
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


# =============================================================================
# MAIN EXECUTION FUNCTION
# =============================================================================

def run_checkin(argv=None):
    """
    Main execution logic.

    Runs until killed. Configuration errors exit with status 1; with --once,
    an unreadable credential file also exits with status 1.
    """
    args = parse_arguments(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    client = None

    try:
        settings = load_settings()
        if args.mode:
            settings.mode = args.mode
        if args.no_countdown:
            settings.countdown = False

        print(BANNER)
        logger.info(f"Base URL: {settings.base_url}")
        logger.info(f"Mode: {settings.mode}")

        client = HttpClient(settings)

        scheduler = Scheduler(
            lambda: run_cycle(client, settings, args.file),
            interval=timedelta(hours=settings.interval_hours),
            countdown=Countdown(enabled=settings.countdown),
        )

        if args.once:
            if scheduler.run_cycle_once() is None:
                sys.exit(1)
            return

        scheduler.run_forever()

    except KeyboardInterrupt:
        logger.warning("Interrupted by user. Exiting...")

    except (RuntimeError, ValueError) as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)

    finally:
        if client:
            client.close()


# =============================================================================
# SCRIPT ENTRY POINT
# =============================================================================

if __name__ == '__main__':
    if __package__ is None:
        print(
            "ERROR: This script must be run as a module.\n"
            "Usage: python -m checkin.run_checkin"
        )
        sys.exit(1)

    run_checkin()
