"""Application settings loaded from environment variables."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import List, Optional

from dotenv import load_dotenv


_ENV_LOADED = False
_ENV_LOCK = Lock()


def _load_env() -> None:
    """Load a .env file from the working directory once per process."""
    global _ENV_LOADED

    if _ENV_LOADED:
        return

    with _ENV_LOCK:
        if _ENV_LOADED:
            return
        load_dotenv(Path(".env"), override=False)
        _ENV_LOADED = True


def _split_addresses(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class Settings:
    """Runtime configuration for the registration site."""

    data_dir: str = "data"
    registrations_file: str = "data/registrations.json"
    views_file: str = "data/views.json"
    public_dir: str = "public"
    email_log_file: str = "data/emails.log"

    app_base_url: Optional[str] = None
    site_timezone: str = "Europe/Paris"

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    smtp_user: str = ""
    smtp_password: str = ""
    mail_from_name: str = "Laurence Merel"
    admin_emails: List[str] = field(default_factory=list)

    airtable_api_key: Optional[str] = None
    airtable_base_id: Optional[str] = None
    airtable_table_name: str = "Registrations"

    webinar_title: str = "Accueillir l’Âme de ton enfant"
    booking_url: str = "https://calendly.com/laurmerel/30min"

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def airtable_configured(self) -> bool:
        return bool(self.airtable_api_key and self.airtable_base_id)

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)


def load_settings() -> Settings:
    """
    Build Settings from the process environment.

    Returns:
        Settings populated from environment variables (after loading .env)

    Behavior:
        - Data files default to paths under DATA_DIR
        - APP_BASE_URL takes precedence over BASE_URL
        - GMAIL_PASS has all whitespace removed (app passwords are shown grouped)
        - ADMIN_EMAILS is a comma-separated list
    """
    _load_env()

    data_dir = os.getenv("DATA_DIR", "data")

    return Settings(
        data_dir=data_dir,
        registrations_file=os.getenv(
            "REGISTRATIONS_FILE", os.path.join(data_dir, "registrations.json")
        ),
        views_file=os.getenv("VIEWS_FILE", os.path.join(data_dir, "views.json")),
        public_dir=os.getenv("PUBLIC_DIR", "public"),
        email_log_file=os.getenv("EMAIL_LOG_FILE", os.path.join(data_dir, "emails.log")),
        app_base_url=os.getenv("APP_BASE_URL") or os.getenv("BASE_URL") or None,
        site_timezone=os.getenv("SITE_TIMEZONE", "Europe/Paris"),
        smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
        smtp_port=int(os.getenv("SMTP_PORT", "465")),
        smtp_user=os.getenv("GMAIL_USER", ""),
        smtp_password="".join(os.getenv("GMAIL_PASS", "").split()),
        mail_from_name=os.getenv("MAIL_FROM_NAME", "Laurence Merel"),
        admin_emails=_split_addresses(os.getenv("ADMIN_EMAILS", "")),
        airtable_api_key=os.getenv("AIRTABLE_API_KEY") or None,
        airtable_base_id=os.getenv("AIRTABLE_BASE_ID") or None,
        airtable_table_name=os.getenv("AIRTABLE_TABLE_NAME", "Registrations"),
        webinar_title=os.getenv("WEBINAR_TITLE", "Accueillir l’Âme de ton enfant"),
        booking_url=os.getenv("BOOKING_URL", "https://calendly.com/laurmerel/30min"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
