"""
processor.py - Account Processor
=================================
Performs the check-in for one account and classifies the response.

Every function here returns a CheckInOutcome instead of raising: token
cleaning errors, signing errors, transport errors and unexpected bodies all
become an outcome, so one bad account never stops the batch. Logging of the
outcome is left to the caller (see log_outcome).

Response Classification:
------------------------
    {"error": {"code": "checkInAlready"}}    -> ALREADY_CHECKED_IN
    {"data": {"currentStreak": 5}}           -> SUCCESS (streak=5)
    anything else without "data"             -> FAILURE (ambiguous, warning)
"""

import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .http_client import CHECK_IN_PATH, WALLET_CHECK_IN_PATH, HttpClient
from .identity import (
    SignatureError,
    TokenSanitizationError,
    build_wallet_message,
    require_clean_token,
    sign_wallet_message,
)
from .loader import AccountRecord, shorten_token

logger = logging.getLogger(__name__)

# Error codes the API uses for "this account already checked in today"
ALREADY_CHECKED_IN_CODES = frozenset({"checkInAlready", "error.checkInAlready"})


# =============================================================================
# OUTCOME TYPES
# =============================================================================

class OutcomeStatus(enum.Enum):
    ALREADY_CHECKED_IN = "already_checked_in"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class CheckInOutcome:
    """Result of one account's check-in for one cycle."""

    status: OutcomeStatus

    # Only set on SUCCESS
    streak: Optional[int] = None

    # Response body or error message, for FAILURE
    detail: Any = None

    # False for the ambiguous "2xx without data" case, which is only a warning
    is_error: bool = False

    @classmethod
    def already(cls) -> "CheckInOutcome":
        return cls(OutcomeStatus.ALREADY_CHECKED_IN)

    @classmethod
    def success(cls, streak: Optional[int]) -> "CheckInOutcome":
        return cls(OutcomeStatus.SUCCESS, streak=streak)

    @classmethod
    def failure(cls, detail: Any, is_error: bool = True) -> "CheckInOutcome":
        return cls(OutcomeStatus.FAILURE, detail=detail, is_error=is_error)


# =============================================================================
# RESPONSE CLASSIFICATION
# =============================================================================

def is_already_checked_in(body: Any) -> bool:
    """Return True if the body carries one of the "already checked in" error codes."""
    if not isinstance(body, dict):
        return False
    error = body.get("error")
    return isinstance(error, dict) and error.get("code") in ALREADY_CHECKED_IN_CODES


def classify_response(body: Any) -> CheckInOutcome:
    """
    Classify a decoded check-in response body.

    Args:
        body: The JSON-decoded response

    Returns:
        ALREADY_CHECKED_IN, SUCCESS with the streak, or a non-error FAILURE
        carrying the whole body when there is no "data" field
    """
    if is_already_checked_in(body):
        return CheckInOutcome.already()

    data = body.get("data") if isinstance(body, dict) else None
    # An empty object or list under "data" still counts as data
    if not data and not isinstance(data, (dict, list)):
        return CheckInOutcome.failure(body, is_error=False)

    streak = data.get("currentStreak") if isinstance(data, dict) else None
    return CheckInOutcome.success(streak)


def _decode_body(body: str) -> Any:
    try:
        return json.loads(body)
    except ValueError:
        return None


def interpret_response(status: int, body: str) -> CheckInOutcome:
    """
    Turn a (status, body) pair from HttpClient.post_json into an outcome.

    - status 0 (transport failure)        -> FAILURE with the error message
    - 2xx                                 -> classify_response on the JSON body
    - non-2xx with the "already" error    -> ALREADY_CHECKED_IN
    - anything else                       -> FAILURE with the body
    """
    if status == 0:
        return CheckInOutcome.failure(body)

    data = _decode_body(body)

    if 200 <= status < 300:
        if data is None:
            return CheckInOutcome.failure(f"Invalid JSON response ({status}): {body[:200]}")
        return classify_response(data)

    if is_already_checked_in(data):
        return CheckInOutcome.already()

    return CheckInOutcome.failure(data if data is not None else f"HTTP {status}: {body[:200]}")


# =============================================================================
# CHECK-IN OPERATIONS
# =============================================================================

def check_in_token_account(client: HttpClient, account: AccountRecord) -> CheckInOutcome:
    """
    Check in one bearer-token account.

    The token is cleaned first; if nothing usable is left the account fails
    without any request being made.

    Args:
        client: An HttpClient (anything with a compatible post_json)
        account: The account to check in

    Returns:
        The CheckInOutcome for this account
    """
    logger.info(f"Processing {account.display_name} (Token: {shorten_token(account.secret)})")

    try:
        token = require_clean_token(account.secret)
    except TokenSanitizationError as e:
        return CheckInOutcome.failure(str(e))

    logger.debug(f"Sending check-in request for {account.display_name}...")
    status, _, body = client.post_json(CHECK_IN_PATH, {}, token=token)
    return interpret_response(status, body)


def check_in_wallet_account(
    client: HttpClient,
    account: AccountRecord,
    timestamp_ms: Optional[int] = None,
) -> CheckInOutcome:
    """
    Check in one wallet account by signing a timestamped message.

    The wallet endpoint is not a confirmed API; its request and response shape
    mirror the token endpoint.

    Args:
        client: An HttpClient (anything with a compatible post_json)
        account: A wallet account; `identity` holds the address
        timestamp_ms: Message timestamp, defaults to now

    Returns:
        The CheckInOutcome for this account
    """
    logger.info(f"Processing {account.display_name}")

    address = account.identity
    message = build_wallet_message(address, timestamp_ms)
    try:
        signature = sign_wallet_message(message, account.secret)
    except SignatureError as e:
        return CheckInOutcome.failure(str(e))

    payload = {
        "walletAddress": address,
        "message": message,
        "signature": signature,
    }

    logger.debug(f"Sending wallet check-in request for {address}...")
    status, _, body = client.post_json(WALLET_CHECK_IN_PATH, payload)
    return interpret_response(status, body)


def log_outcome(display_name: str, outcome: CheckInOutcome):
    """Write the single status line for one account."""
    if outcome.status is OutcomeStatus.ALREADY_CHECKED_IN:
        logger.info(f"{display_name}: Check in already")
    elif outcome.status is OutcomeStatus.SUCCESS:
        logger.info(f"{display_name}: Points collected successfully! Streak: {outcome.streak}")
    elif outcome.is_error:
        logger.error(f"{display_name}: Error collecting points: {outcome.detail}")
    else:
        logger.warning(f"{display_name}: Check-in failed. Response: {outcome.detail}")
