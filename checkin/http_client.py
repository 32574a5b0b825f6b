"""
http_client.py - HTTP Client for API Communication
===================================================
This module handles all HTTP communication with the check-in API:
- Managing one requests Session for the whole process
- Sending browser-like default headers
- Attaching a per-request Bearer token (token mode only)

Each call makes exactly one request; failures are returned, not retried.
"""

from typing import Any, Dict, Optional, Tuple

import requests

from .config import Settings


# Paths of the two check-in endpoints, relative to the base URL
CHECK_IN_PATH = "/v1/check-in"
WALLET_CHECK_IN_PATH = "/v1/check-in-with-wallet"


# =============================================================================
# HTTP CLIENT CLASS
# =============================================================================

class HttpClient:
    """
    HTTP client for the check-in API.

    Usage:
        client = HttpClient(settings)
        status, content_type, body = client.post_json(CHECK_IN_PATH, {}, token="eyJ...")
        client.close()
    """

    def __init__(self, settings: Settings):
        """
        Initialize the HTTP client.

        Args:
            settings: Configuration object containing base URL, timeout and user agent
        """
        self.settings = settings

        # One Session for connection pooling across all accounts
        self.s = requests.Session()
        self.s.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json, text/plain, */*",
            "User-Agent": settings.user_agent,
        })

        self.base = settings.base_url
        self.timeout = settings.timeout_sec

    # -------------------------------------------------------------------------
    # API REQUEST METHODS
    # -------------------------------------------------------------------------

    def post_json(
        self,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> Tuple[int, str, str]:
        """
        POST a JSON body to an API endpoint.

        The Authorization header is set on this request only, never on the
        session, so one account's token cannot leak into the next request.

        Args:
            path: The API endpoint path (e.g., "/v1/check-in")
            payload: JSON body to send (default: empty object)
            token: Optional bearer token for this request

        Returns:
            A tuple of (status_code, content_type, body):
            - status_code: HTTP status code, or 0 if the request never completed
            - content_type: The Content-Type header value
            - body: The response body as a string, or the error description
        """
        url = f"{self.base}{path}"

        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            r = self.s.post(
                url,
                json=payload if payload is not None else {},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            # Network errors: timeout, connection refused, DNS failure, etc.
            return 0, "", f"Network error: {type(e).__name__}: {e}"

        return (
            r.status_code,
            r.headers.get("content-type", ""),
            r.text or "",
        )

    # -------------------------------------------------------------------------
    # CLEANUP METHODS
    # -------------------------------------------------------------------------

    def close(self):
        """Close the HTTP session and release resources."""
        self.s.close()
