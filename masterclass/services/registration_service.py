"""Registration service for handling masterclass sign-ups."""
import logging
from typing import Any, List, Mapping, Optional
from urllib.parse import quote, urlencode

from masterclass.config import Settings
from masterclass.models.registration import Registration
from masterclass.services import email_templates
from masterclass.services.scheduler_service import REMINDER_OFFSETS, BackgroundRunner, ReminderScheduler
from masterclass.utils.date_utils import check_schedulable, parse_session, to_iso_utc
from masterclass.utils.exceptions import ValidationError
from masterclass.utils.validation import (
    INVALID_SESSION_MESSAGE,
    clean_field,
    validate_registration_form,
)

logger = logging.getLogger(__name__)

CONFIRMATION_PAGE = "/confirm.html"
JOIN_PAGE = "/masterclass.html"


class RegistrationService:
    """
    Validates, stores and announces registrations.

    Collaborators are injected so tests can pass in-memory fakes:
        store: read() and update(mutate) over a JSON list
        mailer: send(to, subject, html)
        ledger: record(first_name, last_name, email, session_iso)
        scheduler: ReminderScheduler delivering reminder emails
        runner: BackgroundRunner for fire-and-forget calls
    """

    def __init__(
        self,
        settings: Settings,
        store,
        mailer,
        ledger,
        scheduler: ReminderScheduler,
        runner: BackgroundRunner,
    ):
        self.settings = settings
        self.store = store
        self.mailer = mailer
        self.ledger = ledger
        self.scheduler = scheduler
        self.runner = runner

    def register(self, form: Mapping[str, Any], base_url: Optional[str] = None) -> Registration:
        """
        Register a person for a session.

        Args:
            form: Submitted fields firstName, lastName, email, session, consent
            base_url: Public site URL used for the join link when no
                APP_BASE_URL is configured

        Returns:
            The stored Registration

        Raises:
            ValidationError: If a required field is missing or the session
                timestamp cannot be parsed or scheduled; nothing is stored or sent
            StorageError: If the registration could not be written

        Behavior:
            - Appends to the registration store under a file lock
            - Sends the ledger record and confirmation email in the background
            - Schedules the five reminders relative to the session
            - Notifies the organisers
            - No deduplication: the same email and session may register twice
        """
        is_valid, error_msg = validate_registration_form(form)
        if not is_valid:
            raise ValidationError(error_msg)

        try:
            session_time = parse_session(clean_field(form.get("session")), self.settings.site_timezone)
            check_schedulable(session_time, REMINDER_OFFSETS, self.settings.site_timezone)
        except ValueError as e:
            raise ValidationError(INVALID_SESSION_MESSAGE) from e

        registration = Registration(
            first_name=clean_field(form.get("firstName")),
            last_name=clean_field(form.get("lastName")),
            email=clean_field(form.get("email")),
            session=to_iso_utc(session_time),
        )

        self._persist(registration)
        logger.info(f"Registration stored for {registration.email} at {registration.session}")

        self.runner.submit(
            self.ledger.record,
            registration.first_name,
            registration.last_name,
            registration.email,
            registration.session,
        )
        self._dispatch_notifications(registration, base_url)
        return registration

    def _persist(self, registration: Registration) -> None:
        def append(registrations: Any) -> List[dict]:
            if not isinstance(registrations, list):
                registrations = []
            registrations.append(registration.to_dict())
            return registrations

        self.store.update(append)

    def _dispatch_notifications(self, registration: Registration, base_url: Optional[str]) -> None:
        link = self.join_link(registration.session, base_url)
        tz = self.settings.site_timezone

        subject, body = email_templates.confirmation_email(
            registration.first_name, link, self.settings.webinar_title
        )
        self.runner.submit(self.mailer.send, registration.email, subject, body)

        jobs = email_templates.reminder_jobs(
            registration, link, self.settings.webinar_title, self.settings.booking_url, tz
        )
        self.scheduler.schedule_jobs(registration.session_time, jobs)

        if not self.settings.admin_emails:
            logger.warning("ADMIN_EMAILS is not configured. Skipping admin notification.")
            return

        ledger_link = getattr(self.ledger, "base_link", None)
        subject, body = email_templates.admin_email(
            registration, registration.session_time, tz, ledger_link
        )
        self.runner.submit(self.mailer.send, list(self.settings.admin_emails), subject, body)

    def join_link(self, session_iso: str, base_url: Optional[str] = None) -> str:
        """Build the link to the live page for a session."""
        base = (self.settings.app_base_url or base_url or "").rstrip("/")
        query = urlencode({"session": session_iso}, quote_via=quote)
        return f"{base}{JOIN_PAGE}?{query}"

    @staticmethod
    def confirmation_location(registration: Registration) -> str:
        """Redirect target carrying the registrant's name and session."""
        query = urlencode(
            {"name": registration.first_name, "date": registration.session}, quote_via=quote
        )
        return f"{CONFIRMATION_PAGE}?{query}"

    def get_all_registrations(self) -> List[Registration]:
        return load_registrations(self.store)


def load_registrations(store) -> List[Registration]:
    """
    Load stored registrations in registration order.

    Entries that no longer parse are logged and skipped.
    """
    data = store.read()
    if not isinstance(data, list):
        return []

    registrations = []
    for index, entry in enumerate(data):
        try:
            registrations.append(Registration.from_dict(entry))
        except (ValueError, AttributeError) as e:
            logger.warning(f"Skipping malformed registration #{index}: {e}")
    return registrations
