"""
Marketing form pipeline: validate, verify the CAPTCHA, sync to Klaviyo, store.

Order of side effects is fixed. Nothing leaves the process before the
Turnstile check passes, and storage always runs after the Klaviyo attempt,
whatever its outcome. Only a storage failure fails an otherwise valid,
verified submission.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Mapping

from app.errors import SubmissionError, UnauthorizedError
from app.klaviyo import KLAVIYO_REVISION, SYNC_SKIPPED, KlaviyoClient, SyncResult, split_full_name
from app.models import Submission
from app.phone import PHONE_MODE_NORMALIZE, PHONE_MODES, resolve_phone
from app.store import SubmissionStore, generate_submission_id
from app.turnstile import TURNSTILE_VERIFY_URL, TurnstileVerifier
from app.validation import NAME_MODE_SPLIT, NAME_MODES, LeadForm, validate_submission

logger = logging.getLogger(__name__)

DEFAULT_KLAVIYO_LIST_ID = "RDWzRd"


class SubmissionState(enum.Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    CHALLENGE_VERIFIED = "challenge_verified"
    CRM_SYNCED = "crm_synced"
    CRM_SKIPPED = "crm_skipped"
    CRM_DEGRADED = "crm_degraded"
    STORED = "stored"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _as_bool(value, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on", "enabled")


@dataclass(frozen=True)
class SubmissionSettings:
    """Everything the handler needs, passed in explicitly rather than read from the environment."""

    name_mode: str = NAME_MODE_SPLIT
    phone_mode: str = PHONE_MODE_NORMALIZE
    crm_sync: bool = True
    turnstile_secret: str = ""
    turnstile_verify_url: str = TURNSTILE_VERIFY_URL
    klaviyo_api_key: str = ""
    klaviyo_list_id: str = DEFAULT_KLAVIYO_LIST_ID
    klaviyo_revision: str = KLAVIYO_REVISION
    request_timeout: float = 10

    def __post_init__(self):
        if self.name_mode not in NAME_MODES:
            raise ValueError(f"name_mode must be one of {NAME_MODES}, got {self.name_mode!r}")
        if self.phone_mode not in PHONE_MODES:
            raise ValueError(f"phone_mode must be one of {PHONE_MODES}, got {self.phone_mode!r}")

    @classmethod
    def from_config(cls, config: Mapping) -> "SubmissionSettings":
        """Build settings from a Flask config (or any mapping with the same keys)."""
        return cls(
            name_mode=(config.get("SUBMISSION_NAME_MODE") or NAME_MODE_SPLIT).strip().lower(),
            phone_mode=(config.get("SUBMISSION_PHONE_MODE") or PHONE_MODE_NORMALIZE).strip().lower(),
            crm_sync=_as_bool(config.get("CRM_SYNC_ENABLED"), default=True),
            turnstile_secret=(config.get("TURNSTILE_SECRET_KEY") or "").strip(),
            turnstile_verify_url=config.get("TURNSTILE_VERIFY_URL") or TURNSTILE_VERIFY_URL,
            klaviyo_api_key=(config.get("KLAVIYO_API_KEY") or "").strip(),
            klaviyo_list_id=config.get("KLAVIYO_LIST_ID") or DEFAULT_KLAVIYO_LIST_ID,
            klaviyo_revision=config.get("KLAVIYO_REVISION") or KLAVIYO_REVISION,
            request_timeout=float(config.get("REQUEST_TIMEOUT_SECONDS") or 10),
        )


@dataclass(frozen=True)
class SubmissionResult:
    submission_id: str
    external_profile_id: str | None
    crm_state: SubmissionState

    def to_dict(self) -> dict:
        return {"success": True, "externalProfileId": self.external_profile_id}


class SubmissionHandler:
    """Runs one marketing form submission through the pipeline."""

    def __init__(
        self,
        settings: SubmissionSettings,
        verifier: TurnstileVerifier | None = None,
        crm: KlaviyoClient | None = None,
        store: SubmissionStore | None = None,
    ):
        self.settings = settings
        self.verifier = verifier or TurnstileVerifier(
            settings.turnstile_secret,
            verify_url=settings.turnstile_verify_url,
            timeout=settings.request_timeout,
        )
        if crm is None and settings.crm_sync:
            crm = KlaviyoClient(
                settings.klaviyo_api_key,
                settings.klaviyo_list_id,
                revision=settings.klaviyo_revision,
                timeout=settings.request_timeout,
            )
        self.crm = crm if settings.crm_sync else None
        self.store = store or SubmissionStore()

    def _transition(self, state: SubmissionState, **info) -> SubmissionState:
        logger.debug("Submission %s %s", state.value, info or "")
        return state

    def sync_contact(self, lead: LeadForm, phone: str | None) -> SyncResult:
        """Push the contact to Klaviyo when enabled. Never raises."""
        if self.crm is None:
            return SyncResult.skipped("CRM sync disabled")
        if lead.name:
            first_name, last_name = split_full_name(lead.name)
        else:
            first_name, last_name = lead.firstname, lead.lastname
        # Klaviyo only takes E.164; a raw-mode phone goes through the normalizer first
        crm_phone = resolve_phone(phone)
        try:
            return self.crm.sync_profile(lead.email, first_name, last_name, crm_phone)
        except Exception as e:  # CRM failures never block storage
            logger.warning("Klaviyo contact sync error: %s", e)
            return SyncResult.degraded(str(e))

    def build_submission(self, lead: LeadForm, phone: str | None, profile_id: str | None) -> Submission:
        return Submission(
            id=generate_submission_id(),
            firstname=lead.firstname,
            lastname=lead.lastname,
            name=lead.name,
            email=lead.email,
            phone=phone,
            klaviyo_profile_id=profile_id,
        )

    def submit(self, form: Mapping[str, str], remote_ip: str | None = None) -> SubmissionResult:
        """
        Validate, verify and store one submission.
        Raises ValidationError, UnauthorizedError or InternalError.
        """
        state = self._transition(SubmissionState.RECEIVED)
        try:
            lead = validate_submission(form, self.settings.name_mode)
            state = self._transition(SubmissionState.VALIDATED)

            if not self.verifier.verify(lead.captcha_token, remote_ip=remote_ip):
                raise UnauthorizedError("CAPTCHA verification failed. Please try again.")
            state = self._transition(SubmissionState.CHALLENGE_VERIFIED)

            phone = resolve_phone(lead.phone, self.settings.phone_mode)
            sync = self.sync_contact(lead, phone)
            if sync.is_ok:
                crm_state = SubmissionState.CRM_SYNCED
            elif sync.status == SYNC_SKIPPED:
                crm_state = SubmissionState.CRM_SKIPPED
            else:
                crm_state = SubmissionState.CRM_DEGRADED
            state = self._transition(crm_state, reason=sync.reason)

            submission = self.store.insert(self.build_submission(lead, phone, sync.profile_id))
            self._transition(SubmissionState.STORED, id=submission.id)
        except SubmissionError as e:
            self._transition(SubmissionState.FAILED, after=state.value, code=e.code)
            raise

        logger.info("Marketing form stored: %s (%s)", submission.id, crm_state.value)
        self._transition(SubmissionState.SUCCEEDED)
        return SubmissionResult(
            submission_id=submission.id,
            external_profile_id=sync.profile_id,
            crm_state=crm_state,
        )
