"""Airtable contact ledger client."""
import logging
from typing import Dict, Optional
from urllib.parse import quote

import requests

from masterclass.config import Settings

logger = logging.getLogger(__name__)

AIRTABLE_API_URL = "https://api.airtable.com/v0"


class AirtableLedger:
    """Records each registration as a row in an Airtable table."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None, timeout: int = 10):
        self.settings = settings
        self.http = session or requests.Session()
        self.timeout = timeout

    @property
    def table_url(self) -> str:
        return (
            f"{AIRTABLE_API_URL}/{self.settings.airtable_base_id}/"
            f"{quote(self.settings.airtable_table_name, safe='')}"
        )

    @property
    def base_link(self) -> Optional[str]:
        """Link to the Airtable base for the admin notice, if configured."""
        if not self.settings.airtable_base_id:
            return None
        return f"https://airtable.com/{self.settings.airtable_base_id}"

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.airtable_api_key}",
            "Content-Type": "application/json",
        }

    def record(self, first_name: str, last_name: str, email: str, session_iso: str) -> Optional[str]:
        """
        Create a ledger row for a registration.

        Args:
            first_name: Registrant first name
            last_name: Registrant last name
            email: Registrant email
            session_iso: Session as UTC ISO 8601 string

        Returns:
            The Airtable record ID, or None if skipped or failed

        Behavior:
            - Skips with a warning when API key or base ID is missing
            - Logs HTTP and network errors; never raises them
        """
        if not self.settings.airtable_configured:
            logger.warning("Airtable credentials are not fully configured. Skipping Airtable update.")
            return None

        payload = {
            "fields": {
                "Prénom": first_name,
                "Nom": last_name,
                "Email": email,
                "Session": session_iso,
            }
        }

        try:
            response = self.http.post(
                self.table_url, json=payload, headers=self._build_headers(), timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Error adding registration to Airtable: {e}")
            return None

        try:
            record_id = response.json().get("id")
        except ValueError:
            record_id = None
        logger.info(f"New registration added to Airtable: {record_id}")
        return record_id
