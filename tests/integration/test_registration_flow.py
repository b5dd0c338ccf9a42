"""Integration tests for the HTTP registration and tracking flow."""
import json
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from masterclass.api import Services, create_app, resolve_asset
from masterclass.services.registration_service import RegistrationService
from masterclass.services.storage_service import JsonFileStore
from masterclass.services.tracking_service import TrackingService


@pytest.fixture
def file_stores(settings):
    registrations = JsonFileStore(settings.registrations_file, list)
    registrations.ensure_exists()
    views = JsonFileStore(settings.views_file, dict)
    return registrations, views


@pytest.fixture
def services(settings, file_stores, mailer, ledger, scheduler, runner, clock, queue):
    registrations, views = file_stores
    return Services(
        settings=settings,
        registration=RegistrationService(
            settings=settings,
            store=registrations,
            mailer=mailer,
            ledger=ledger,
            scheduler=scheduler,
            runner=runner,
        ),
        tracking=TrackingService(views, clock=clock),
        runner=runner,
        reminder_queue=queue,
    )


@pytest.fixture
def client(services):
    with TestClient(create_app(services=services)) as test_client:
        yield test_client


def _stored(path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class TestRegisterEndpoint:
    """Test POST /register."""

    def test_valid_registration_redirects_to_confirmation(self, client, settings, valid_form):
        """A valid form redirects to the confirmation page with name and date."""
        response = client.post("/register", data=valid_form, follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == (
            "/confirm.html?name=Camille&date=2030-01-15T18%3A30%3A00.000Z"
        )

    def test_valid_registration_is_persisted(self, client, settings, valid_form):
        """Each registration is appended in order with a UTC session."""
        client.post("/register", data=valid_form, follow_redirects=False)
        client.post(
            "/register",
            data={**valid_form, "firstName": "Léa", "session": "2030-01-16T20:30:00+01:00"},
            follow_redirects=False,
        )

        stored = _stored(settings.registrations_file)
        assert [entry["firstName"] for entry in stored] == ["Camille", "Léa"]
        assert stored[1]["session"] == "2030-01-16T19:30:00.000Z"

    def test_valid_registration_notifies(self, client, mailer, ledger, queue, valid_form):
        """Ledger, confirmation and admin notice go out; five reminders are queued."""
        client.post("/register", data=valid_form, follow_redirects=False)

        assert len(ledger.records) == 1
        assert [m["subject"] for m in mailer.sent] == [
            "✨ Ton voyage commence — Masterclass Accueillir l’Âme de ton enfant",
            "Nouvelle inscription à la masterclass",
        ]
        assert len(queue.pending) == 5

    def test_join_link_from_forwarded_headers(self, client, settings, mailer, valid_form):
        """Without APP_BASE_URL the proxy headers build the link."""
        settings.app_base_url = None

        client.post(
            "/register",
            data=valid_form,
            headers={"X-Forwarded-Proto": "https", "X-Forwarded-Host": "inscription.example.org"},
            follow_redirects=False,
        )

        assert "https://inscription.example.org/masterclass.html?session=" in mailer.sent[0]["html"]

    @pytest.mark.parametrize("missing", ["firstName", "email", "session", "consent"])
    def test_missing_field_returns_400_without_side_effects(
        self, client, settings, mailer, ledger, queue, valid_form, missing
    ):
        """Each missing field gives a 400 and leaves nothing behind."""
        form = {key: value for key, value in valid_form.items() if key != missing}

        response = client.post("/register", data=form, follow_redirects=False)

        assert response.status_code == 400
        assert "Merci de remplir tous les champs requis" in response.text
        assert _stored(settings.registrations_file) == []
        assert mailer.sent == []
        assert ledger.records == []
        assert queue.pending == []

    def test_invalid_session_returns_400(self, client, settings, valid_form):
        """An unparseable session is a client error."""
        response = client.post("/register", data={**valid_form, "session": "bientôt"}, follow_redirects=False)

        assert response.status_code == 400
        assert _stored(settings.registrations_file) == []

    @pytest.mark.parametrize("session", ["9999-12-31T23:30:00Z", "0001-01-01T00:30:00+01:00"])
    def test_out_of_range_session_returns_400(self, client, settings, mailer, ledger, queue, valid_form, session):
        """Sessions at the edges of the datetime range are rejected before storing."""
        response = client.post("/register", data={**valid_form, "session": session}, follow_redirects=False)

        assert response.status_code == 400
        assert _stored(settings.registrations_file) == []
        assert mailer.sent == []
        assert ledger.records == []
        assert queue.pending == []

    def test_corrupt_store_is_overwritten(self, client, settings, valid_form):
        """A corrupt registrations file is replaced by the next write."""
        with open(settings.registrations_file, "w", encoding="utf-8") as f:
            f.write("not json")

        response = client.post("/register", data=valid_form, follow_redirects=False)

        assert response.status_code == 302
        assert len(_stored(settings.registrations_file)) == 1

    def test_late_registration_sends_due_reminders(self, client, clock, mailer, queue, valid_form):
        """Reminders already due are sent with the confirmation."""
        session = clock.now + timedelta(hours=3)

        client.post("/register", data={**valid_form, "session": session.isoformat()}, follow_redirects=False)

        # confirmation, -24h, -5h, admin
        assert len(mailer.sent) == 4
        assert len(queue.pending) == 3


class TestTrackingEndpoints:
    """Test POST /track, /track-complete and GET /admin/views."""

    def test_track_returns_204_and_stores_progress(self, client, settings):
        """Progress pings return an empty 204."""
        response = client.post("/track", json={"token": "tok", "watchedSeconds": 120})

        assert response.status_code == 204
        assert response.content == b""
        assert _stored(settings.views_file)["tok"]["watched"] == 120

    def test_track_keeps_maximum(self, client, settings):
        """A lower ping never lowers the watched high-water mark."""
        client.post("/track", json={"token": "tok", "watchedSeconds": 120})
        client.post("/track", json={"token": "tok", "watchedSeconds": 90})

        assert _stored(settings.views_file)["tok"]["watched"] == 120

    def test_track_complete_marks_token(self, client, settings):
        """Completion sets the flag for the token."""
        response = client.post("/track-complete", json={"token": "tok"})

        assert response.status_code == 204
        assert _stored(settings.views_file)["tok"]["completed"] is True

    def test_empty_token_is_ignored(self, client, settings):
        """A blank token writes nothing."""
        response = client.post("/track", json={"token": "  ", "watchedSeconds": 10})

        assert response.status_code == 204
        assert client.get("/admin/views").json() == {}

    def test_malformed_json_is_treated_as_empty(self, client):
        """An unparseable body is read as {}."""
        response = client.post(
            "/track", content=b"{oops", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 204
        assert client.get("/admin/views").json() == {}

    def test_admin_views_returns_store(self, client):
        """The export returns every tracked token."""
        client.post("/track", json={"token": "a", "watchedSeconds": "45.5"})
        client.post("/track-complete", json={"token": "b"})

        views = client.get("/admin/views").json()

        assert views == {
            "a": {"watched": 45, "completed": False, "lastPing": "2030-01-10T12:00:00.000Z"},
            "b": {"watched": 0, "completed": True, "lastPing": "2030-01-10T12:00:00.000Z"},
        }


class TestStaticAndFallback:
    """Test asset serving and not-found handling."""

    @pytest.fixture(autouse=True)
    def assets(self, settings):
        with open(f"{settings.public_dir}/index.html", "w", encoding="utf-8") as f:
            f.write("<h1>Inscription</h1>")
        with open(f"{settings.public_dir}/script.js", "w", encoding="utf-8") as f:
            f.write("console.log('ok');")

    def test_root_serves_index(self, client):
        """The site root serves index.html."""
        response = client.get("/")

        assert response.status_code == 200
        assert "<h1>Inscription</h1>" in response.text
        assert response.headers["content-type"].startswith("text/html")

    def test_named_asset(self, client):
        """Other files are served with their content type."""
        response = client.get("/script.js")

        assert response.status_code == 200
        assert "javascript" in response.headers["content-type"]

    def test_unknown_file_is_404(self, client):
        """Missing files give the French not-found text."""
        response = client.get("/missing.html")

        assert response.status_code == 404
        assert response.text == "Fichier non trouvé"

    def test_unknown_post_route_is_404(self, client):
        """Unknown non-GET routes give the page-not-found text."""
        response = client.post("/nowhere")

        assert response.status_code == 404
        assert response.text == "Page non trouvée"

    def test_slots_endpoint_lists_fourteen_days(self, client):
        """The picker window covers fourteen days, each with slots."""
        days = client.get("/slots").json()

        assert len(days) == 14
        assert all(day["slots"] for day in days)

    def test_resolve_asset_blocks_traversal(self, settings, tmp_path):
        """Paths escaping the asset root resolve to nothing."""
        (tmp_path / "secret.txt").write_text("x", encoding="utf-8")

        assert resolve_asset(settings.public_dir, "/../secret.txt") is None
        assert resolve_asset(settings.public_dir, "/index.html") is not None


class TestLifespan:
    """Test application shutdown."""

    def test_shutdown_stops_reminder_queue(self, services, queue):
        """Leaving the app context stops the reminder queue."""
        with TestClient(create_app(services=services)):
            assert queue.stopped is False

        assert queue.stopped is True
