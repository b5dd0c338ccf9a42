"""HTTP interface: registration form, view tracking, admin export and static pages."""
import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, RedirectResponse, Response
from fastapi.concurrency import run_in_threadpool

from masterclass.config import Settings, load_settings
from masterclass.services.ledger_service import AirtableLedger
from masterclass.services.mail_service import SmtpMailer
from masterclass.services.registration_service import RegistrationService
from masterclass.services.scheduler_service import BackgroundRunner, ReminderQueue, ReminderScheduler
from masterclass.services.storage_service import JsonFileStore
from masterclass.services.tracking_service import TrackingService
from masterclass.utils.calendar_slots import slot_table
from masterclass.utils.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

FILE_NOT_FOUND = "Fichier non trouvé"
PAGE_NOT_FOUND = "Page non trouvée"
SERVER_ERROR = "Une erreur est survenue, merci de réessayer plus tard."


@dataclass
class Services:
    """Collaborators wired into the HTTP layer."""

    settings: Settings
    registration: RegistrationService
    tracking: TrackingService
    runner: BackgroundRunner
    reminder_queue: Optional[ReminderQueue] = None


def build_services(settings: Settings) -> Services:
    """Wire the production collaborators from settings."""
    runner = BackgroundRunner()
    reminder_queue = ReminderQueue()
    mailer = SmtpMailer(settings)

    def send_later(to: str, subject: str, body: str) -> None:
        runner.submit(mailer.send, to, subject, body)

    registrations_store = JsonFileStore(settings.registrations_file, list)
    registrations_store.ensure_exists()
    views_store = JsonFileStore(settings.views_file, dict)

    registration = RegistrationService(
        settings=settings,
        store=registrations_store,
        mailer=mailer,
        ledger=AirtableLedger(settings),
        scheduler=ReminderScheduler(send=send_later, queue=reminder_queue),
        runner=runner,
    )
    return Services(
        settings=settings,
        registration=registration,
        tracking=TrackingService(views_store),
        runner=runner,
        reminder_queue=reminder_queue,
    )


def request_base_url(request: Request) -> str:
    """Public base URL as seen by the client, honoring proxy headers."""
    proto = request.headers.get("x-forwarded-proto") or request.url.scheme
    host = request.headers.get("x-forwarded-host") or request.headers.get("host", "")
    return f"{proto}://{host}"


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Parse a JSON object body; anything else is treated as {}."""
    raw = await request.body()
    try:
        data = json.loads(raw or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def resolve_asset(public_dir: str, url_path: str) -> Optional[Path]:
    """
    Map a URL path to a file under the asset root.

    Returns:
        The file path, or None if missing or outside the root
    """
    relative = url_path.lstrip("/") or "index.html"
    root = Path(public_dir).resolve()
    candidate = (root / relative).resolve()
    if root != candidate and root not in candidate.parents:
        return None
    if not candidate.is_file():
        return None
    return candidate


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted
        services: Pre-built collaborators (tests pass fakes); built from
            settings when omitted
    """
    if services is None:
        services = build_services(settings or load_settings())
    settings = services.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Masterclass app ready, serving assets from {settings.public_dir}")
        yield
        # Pending reminders are dropped with the process
        if services.reminder_queue is not None:
            services.reminder_queue.shutdown(wait=False)
        services.runner.shutdown(wait=False)

    app = FastAPI(title="Masterclass Registration", lifespan=lifespan, docs_url=None, redoc_url=None)
    app.state.services = services

    @app.post("/register")
    async def register(request: Request):
        form = await request.form()
        try:
            registration = await run_in_threadpool(
                services.registration.register, dict(form), request_base_url(request)
            )
        except ValidationError as e:
            return PlainTextResponse(str(e), status_code=400)
        except (StorageError, TimeoutError):
            logger.exception("Could not store registration")
            return PlainTextResponse(SERVER_ERROR, status_code=500)

        location = RegistrationService.confirmation_location(registration)
        return RedirectResponse(location, status_code=302)

    @app.post("/track")
    async def track(request: Request):
        body = await read_json_body(request)
        await run_in_threadpool(
            services.tracking.record_progress, body.get("token"), body.get("watchedSeconds")
        )
        return Response(status_code=204)

    @app.post("/track-complete")
    async def track_complete(request: Request):
        body = await read_json_body(request)
        await run_in_threadpool(services.tracking.mark_completed, body.get("token"))
        return Response(status_code=204)

    @app.get("/admin/views")
    async def admin_views():
        views = await run_in_threadpool(services.tracking.get_all_views)
        return JSONResponse(views)

    @app.get("/slots")
    async def slots():
        today = datetime.now(ZoneInfo(settings.site_timezone)).date()
        return JSONResponse(slot_table(today))

    @app.get("/{file_path:path}")
    async def static_file(file_path: str):
        asset = resolve_asset(settings.public_dir, file_path)
        if asset is None:
            return PlainTextResponse(FILE_NOT_FOUND, status_code=404)
        return FileResponse(asset)

    @app.api_route("/{file_path:path}", methods=["POST", "PUT", "PATCH", "DELETE"])
    async def not_found(file_path: str):
        return PlainTextResponse(PAGE_NOT_FOUND, status_code=404)

    return app
