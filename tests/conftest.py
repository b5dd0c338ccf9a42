"""Shared fixtures for tests."""
from datetime import datetime, timezone

import pytest

from masterclass.config import Settings
from masterclass.services.registration_service import RegistrationService
from masterclass.services.scheduler_service import ReminderScheduler
from masterclass.services.tracking_service import TrackingService

from tests.fakes import (
    FakeLedger,
    FakeMailer,
    FrozenClock,
    ImmediateRunner,
    InMemoryStore,
    ManualQueue,
)


NOW = datetime(2030, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FrozenClock(NOW)


@pytest.fixture
def queue():
    return ManualQueue()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def runner():
    return ImmediateRunner()


@pytest.fixture
def settings(tmp_path):
    public_dir = tmp_path / "public"
    public_dir.mkdir()
    return Settings(
        data_dir=str(tmp_path),
        registrations_file=str(tmp_path / "registrations.json"),
        views_file=str(tmp_path / "views.json"),
        public_dir=str(public_dir),
        email_log_file=str(tmp_path / "emails.log"),
        app_base_url="https://masterclass.example.com",
        admin_emails=["orga1@example.com", "orga2@example.com"],
    )


@pytest.fixture
def scheduler(mailer, queue, clock):
    return ReminderScheduler(send=mailer.send, queue=queue, clock=clock)


@pytest.fixture
def registration_store():
    return InMemoryStore([])


@pytest.fixture
def views_store():
    return InMemoryStore({})


@pytest.fixture
def registration_service(settings, registration_store, mailer, ledger, scheduler, runner):
    return RegistrationService(
        settings=settings,
        store=registration_store,
        mailer=mailer,
        ledger=ledger,
        scheduler=scheduler,
        runner=runner,
    )


@pytest.fixture
def tracking_service(views_store, clock):
    return TrackingService(views_store, clock=clock)


@pytest.fixture
def valid_form():
    return {
        "firstName": "Camille",
        "lastName": "Durand",
        "email": "camille@example.com",
        "session": "2030-01-15T18:30:00.000Z",
        "consent": "on",
    }
