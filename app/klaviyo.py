"""Best-effort contact sync to Klaviyo (profile upsert + list subscription)."""
import logging
from dataclasses import dataclass

import requests

from app.errors import ExternalSyncError

KLAVIYO_API_URL = "https://a.klaviyo.com/api"
KLAVIYO_REVISION = "2024-10-15"

logger = logging.getLogger(__name__)

SYNC_OK = "ok"
SYNC_DEGRADED = "degraded"
SYNC_SKIPPED = "skipped"


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a CRM sync: ok with a profile id, degraded with a reason, or skipped."""

    status: str
    profile_id: str | None = None
    reason: str | None = None

    @classmethod
    def ok(cls, profile_id: str) -> "SyncResult":
        return cls(SYNC_OK, profile_id=profile_id)

    @classmethod
    def degraded(cls, reason: str) -> "SyncResult":
        return cls(SYNC_DEGRADED, reason=reason)

    @classmethod
    def skipped(cls, reason: str) -> "SyncResult":
        return cls(SYNC_SKIPPED, reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.status == SYNC_OK


def split_full_name(name: str) -> tuple[str, str | None]:
    """'Ada King Lovelace' -> ('Ada', 'King Lovelace'); 'Ada' -> ('Ada', None)."""
    parts = name.split(None, 1)
    if not parts:
        return "", None
    if len(parts) == 1:
        return parts[0], None
    return parts[0], parts[1]


def _subscriptions(phone: str | None) -> dict:
    # Email always; SMS only with a dialable number
    subs = {"email": {"marketing": {"consent": "SUBSCRIBED"}}}
    if phone:
        subs["sms"] = {"marketing": {"consent": "SUBSCRIBED"}}
    return subs


class KlaviyoClient:
    """Thin wrapper over the two Klaviyo endpoints the marketing form needs."""

    def __init__(
        self,
        api_key: str,
        list_id: str,
        revision: str = KLAVIYO_REVISION,
        timeout: float = 10,
        base_url: str = KLAVIYO_API_URL,
    ):
        self.api_key = (api_key or "").strip()
        self.list_id = list_id
        self.revision = revision or KLAVIYO_REVISION
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    @property
    def headers(self) -> dict:
        return {
            "Authorization": f"Klaviyo-API-Key {self.api_key}",
            "revision": self.revision,
            "accept": "application/vnd.api+json",
            "content-type": "application/vnd.api+json",
        }

    def _post(self, path: str, payload: dict, expected: tuple[int, ...]) -> requests.Response:
        try:
            r = requests.post(
                f"{self.base_url}{path}",
                json=payload,
                headers=self.headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ExternalSyncError(f"{path}: {e}") from e
        if r.status_code not in expected:
            raise ExternalSyncError(
                f"{path}: HTTP {r.status_code} – {(r.text or '')[:400]}"
            )
        return r

    def upsert_profile(
        self,
        email: str,
        first_name: str | None = None,
        last_name: str | None = None,
        phone: str | None = None,
    ) -> str:
        """Create or update the profile by email; return the Klaviyo profile id."""
        attributes = {"email": email}
        if first_name:
            attributes["first_name"] = first_name
        if last_name:
            attributes["last_name"] = last_name
        if phone:
            attributes["phone_number"] = phone
        r = self._post(
            "/profile-import",
            {"data": {"type": "profile", "attributes": attributes}},
            expected=(200, 201),
        )
        try:
            profile_id = r.json()["data"]["id"]
        except (ValueError, KeyError, TypeError) as e:
            raise ExternalSyncError(f"/profile-import: unexpected response ({e})") from e
        if not profile_id:
            raise ExternalSyncError("/profile-import: response has no profile id")
        return profile_id

    def subscribe_profile(self, email: str, phone: str | None = None) -> None:
        """Queue a bulk subscription job adding the profile to the marketing list."""
        attributes = {"email": email, "subscriptions": _subscriptions(phone)}
        if phone:
            attributes["phone_number"] = phone
        payload = {
            "data": {
                "type": "profile-subscription-bulk-create-job",
                "attributes": {
                    "profiles": {"data": [{"type": "profile", "attributes": attributes}]},
                },
                "relationships": {"list": {"data": {"type": "list", "id": self.list_id}}},
            }
        }
        self._post("/profile-subscription-bulk-create-jobs", payload, expected=(202,))

    def sync_profile(
        self,
        email: str,
        first_name: str | None = None,
        last_name: str | None = None,
        phone: str | None = None,
    ) -> SyncResult:
        """Upsert and subscribe. Logs errors, does not raise."""
        if not self.api_key:
            return SyncResult.skipped("KLAVIYO_API_KEY not set")
        try:
            profile_id = self.upsert_profile(email, first_name, last_name, phone)
            self.subscribe_profile(email, phone)
        except ExternalSyncError as e:
            logger.warning("Klaviyo contact sync failed for %s: %s", email, e)
            return SyncResult.degraded(str(e))
        logger.info("Klaviyo: profile %s synced to list %s", profile_id, self.list_id)
        return SyncResult.ok(profile_id)
