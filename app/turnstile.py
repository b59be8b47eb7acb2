"""Server-side verification of Cloudflare Turnstile tokens."""
import logging

import requests

TURNSTILE_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"

logger = logging.getLogger(__name__)


class TurnstileVerifier:
    """Checks a client token against the siteverify endpoint. Fails closed on any error."""

    def __init__(self, secret: str, verify_url: str = TURNSTILE_VERIFY_URL, timeout: float = 10):
        self.secret = (secret or "").strip()
        self.verify_url = verify_url or TURNSTILE_VERIFY_URL
        self.timeout = timeout

    def verify(self, token: str, remote_ip: str | None = None) -> bool:
        if not self.secret:
            logger.warning("Turnstile: TURNSTILE_SECRET_KEY not set, rejecting token")
            return False
        if not token:
            return False
        data = {"secret": self.secret, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip
        try:
            r = requests.post(self.verify_url, data=data, timeout=self.timeout)
            outcome = r.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Turnstile verification error: %s", e)
            return False
        if not isinstance(outcome, dict):
            logger.warning("Turnstile verification returned unexpected payload: %r", outcome)
            return False
        if outcome.get("success") is True:
            return True
        logger.info("Turnstile rejected token: %s", outcome.get("error-codes") or [])
        return False
