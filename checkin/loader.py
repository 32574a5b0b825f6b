"""
loader.py - Credential File Loader
===================================
This module reads the credential file and turns each line into an AccountRecord.

Supported Input Formats:
------------------------
- Token file  : one `name:token` per line (token is usually a JWT)
- Wallet file : one `name:privateKeyHex` per line

Lines are split on the FIRST colon, so the secret itself may contain colons.
Blank lines are ignored. Line numbers in warnings count non-empty lines,
starting at 1.

Malformed Lines:
----------------
- Token mode  : the line is kept under a fallback name ("Account 3") with the
                whole line as the token, so one bad line never blocks the batch.
- Wallet mode : the line is dropped with a warning; a key that does not derive
                an address is dropped with an error.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import jwt
from eth_account import Account

logger = logging.getLogger(__name__)

DELIMITER = ":"


# =============================================================================
# ACCOUNT RECORD
# =============================================================================

@dataclass(frozen=True)
class AccountRecord:
    """One account read from the credential file."""

    # Human-readable label used in every log line, e.g. "alice (userId: 42)"
    display_name: str

    # The bearer token or the wallet private key, exactly as read
    secret: str

    # Decoded user id (token mode) or checksum address (wallet mode)
    identity: Optional[str] = None


# =============================================================================
# DISPLAY HELPERS
# =============================================================================

def shorten_token(token: str) -> str:
    """
    Shorten a secret for display so it never hits the log in full.

    Examples:
        shorten_token("short")                     -> "short"
        shorten_token("eyJhbGciOiJIUzI1NiJ9.x.y")  -> "eyJhbGciOi...NiJ9.x.y"
    """
    if len(token) <= 20:
        return token
    return f"{token[:10]}...{token[-10:]}"


def decode_token_payload(token: str) -> dict:
    """
    Decode the payload segment of a JWT WITHOUT verifying its signature.

    The result is only used to show a user id next to the account name. It has
    no bearing on the request itself: the token is sent as-is regardless of
    whether this succeeds.

    Args:
        token: A "header.payload.signature" string

    Returns:
        The payload as a dict, or {} if the token is not a decodable JWT
    """
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        logger.debug(f"Could not decode token payload ({shorten_token(token)}): {e}")
        return {}


def _split_line(line: str) -> Tuple[str, str]:
    """Split a line on the first delimiter into (name, secret); halves may be empty."""
    name, _, secret = line.partition(DELIMITER)
    return name.strip(), secret.strip()


def read_credential_lines(filepath: str) -> List[str]:
    """
    Read a credential file and return its non-empty, trimmed lines.

    Raises:
        FileNotFoundError: If the file doesn't exist
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Credential file not found: {filepath}")

    content = path.read_text(encoding="utf-8-sig")
    return [line.strip() for line in content.splitlines() if line.strip()]


# =============================================================================
# TOKEN ACCOUNTS
# =============================================================================

def load_token_accounts(filepath: str) -> List[AccountRecord]:
    """
    Load `name:token` accounts from a text file.

    Every non-empty line yields exactly one record, in file order. A line
    without a name or without a token is kept under a fallback name with the
    raw line as its token.

    Args:
        filepath: Path to the token file

    Returns:
        List of AccountRecord, one per non-empty line

    Raises:
        FileNotFoundError: If the token file doesn't exist
    """
    logger.info(f"Reading tokens from {filepath}...")
    lines = read_credential_lines(filepath)

    accounts = []
    for index, line in enumerate(lines, start=1):
        name, token = _split_line(line)

        if not name or not token:
            logger.warning(f"Invalid format at line {index}: {shorten_token(line)}")
            accounts.append(AccountRecord(display_name=f"Account {index}", secret=line))
            continue

        user_id = decode_token_payload(token).get("userId")
        hint = str(user_id) if user_id is not None else "unknown"
        accounts.append(AccountRecord(
            display_name=f"{name} (userId: {hint})",
            secret=token,
            identity=hint,
        ))

    logger.info(f"Parsed accounts: {', '.join(a.display_name for a in accounts)}")
    return accounts


# =============================================================================
# WALLET ACCOUNTS
# =============================================================================

def derive_address(private_key: str) -> str:
    """Return the checksum address for a hex private key (with or without 0x)."""
    return Account.from_key(private_key).address


def load_wallet_accounts(filepath: str) -> List[AccountRecord]:
    """
    Load `name:privateKey` accounts from a text file.

    Each key is validated by deriving its address. Malformed lines and keys
    that do not derive an address are dropped individually; the rest of the
    file is still loaded.

    Args:
        filepath: Path to the wallet file

    Returns:
        List of AccountRecord with `identity` set to the wallet address

    Raises:
        FileNotFoundError: If the wallet file doesn't exist
    """
    logger.info(f"Reading wallets from {filepath}...")
    lines = read_credential_lines(filepath)

    accounts = []
    dropped = 0
    for index, line in enumerate(lines, start=1):
        name, private_key = _split_line(line)

        if not name or not private_key:
            logger.warning(f"Invalid format at line {index}, skipping: {shorten_token(line)}")
            dropped += 1
            continue

        try:
            address = derive_address(private_key)
        except Exception as e:
            logger.error(f"Invalid private key for {name} at line {index}, skipping: {e}")
            dropped += 1
            continue

        accounts.append(AccountRecord(
            display_name=f"{name} ({shorten_token(address)})",
            secret=private_key,
            identity=address,
        ))

    if dropped:
        logger.warning(f"Skipped {dropped} of {len(lines)} wallet lines")
    logger.info(f"Parsed accounts: {', '.join(a.display_name for a in accounts)}")
    return accounts
