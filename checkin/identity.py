import re
import time
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_defunct

# Anything outside base64url plus JWT punctuation is noise (stray quotes,
# BOMs, zero-width spaces copied along with the token).
_TOKEN_NOISE = re.compile(r"[^A-Za-z0-9\-._~+/=]")


class TokenSanitizationError(ValueError):
    """The bearer token has no usable characters left after cleaning."""


class SignatureError(ValueError):
    """The wallet check-in message could not be signed."""


def sanitize_token(token: str) -> str:
    """
    Strip every character that cannot appear in a bearer token.

    Examples:
        sanitize_token("abc!!def")   -> "abcdef"
        sanitize_token("!!!")        -> ""
    """
    return _TOKEN_NOISE.sub("", token)


def require_clean_token(token: str) -> str:
    """Sanitize a token, raising TokenSanitizationError if nothing is left."""
    cleaned = sanitize_token(token)
    if not cleaned:
        raise TokenSanitizationError("Token is empty after cleaning")
    return cleaned


def build_wallet_message(address: str, timestamp_ms: Optional[int] = None) -> str:
    """Build the message a wallet signs to prove ownership at check-in time."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"Check in with wallet {address} at {timestamp_ms}"


def sign_wallet_message(message: str, private_key: str) -> str:
    """
    Produce an EIP-191 personal-sign signature over `message`.

    Returns:
        The 65-byte signature as a 0x-prefixed hex string.

    Raises:
        SignatureError: If the key is malformed or signing fails.
    """
    try:
        signed = Account.sign_message(encode_defunct(text=message), private_key)
    except Exception as e:
        raise SignatureError(f"Could not sign check-in message: {e}") from e
    return "0x" + bytes(signed.signature).hex()
