"""Admin dashboard listing registrations and replay views."""
from collections import Counter
from typing import Any, Dict, Iterable, List

import streamlit as st

from masterclass.models.registration import Registration
from masterclass.models.view_record import ViewRecord
from masterclass.utils.date_utils import format_session_fr, parse_session
from masterclass.utils.html_utils import html_block, text


def format_watched(seconds: int) -> str:
    """Format watched seconds as "1 h 02 min", "12 min 05 s" or "42 s"."""
    seconds = max(int(seconds or 0), 0)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours} h {minutes:02d} min"
    if minutes:
        return f"{minutes} min {secs:02d} s"
    return f"{secs} s"


def summarize_views(views: Dict[str, Any]) -> Dict[str, Any]:
    """
    Aggregate the view store.

    Returns:
        Dict with total, completed and average_watched (seconds, int)
    """
    records = [ViewRecord.from_dict(entry or {}) for entry in views.values()]
    total = len(records)
    completed = sum(1 for record in records if record.completed)
    average = sum(record.watched for record in records) // total if total else 0
    return {"total": total, "completed": completed, "average_watched": average}


def registration_rows(registrations: Iterable[Registration], tz: str = "Europe/Paris") -> List[Dict[str, str]]:
    """Table rows for the registrations list, in registration order."""
    return [
        {
            "Prénom": registration.first_name,
            "Nom": registration.last_name,
            "Email": registration.email,
            "Créneau": format_session_fr(registration.session_time, tz),
        }
        for registration in registrations
    ]


def registrations_per_session(registrations: Iterable[Registration], tz: str = "Europe/Paris") -> List[Dict[str, Any]]:
    """Headcount per session, earliest session first."""
    counts = Counter(registration.session for registration in registrations)
    return [
        {"Créneau": format_session_fr(parse_session(session), tz), "Inscrits": count}
        for session, count in sorted(counts.items())
    ]


def view_rows(views: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Table rows for the replay tracking store, most watched first."""
    rows = []
    for token, entry in views.items():
        record = ViewRecord.from_dict(entry or {})
        rows.append({
            "Token": token,
            "Visionné": format_watched(record.watched),
            "Terminé": "✅" if record.completed else "—",
            "Dernier ping": record.last_ping or "—",
            "_watched": record.watched,
        })
    rows.sort(key=lambda row: row["_watched"], reverse=True)
    for row in rows:
        del row["_watched"]
    return rows


def _render_stat_card(label: str, value: Any) -> str:
    """HTML for one summary card."""
    return html_block(f"""
        <div style="background: #16213e; border-radius: 12px; padding: 16px; text-align: center;">
            <div style="color: #94a3b8; font-size: 0.9rem;">{text(label)}</div>
            <div style="color: #f1f5f9; font-size: 1.8rem; font-weight: 700;">{text(str(value))}</div>
        </div>
    """)


def render_admin_dashboard(registrations: List[Registration], views: Dict[str, Any], tz: str = "Europe/Paris") -> None:
    """Render the dashboard page."""
    st.title("Masterclass · Administration")

    summary = summarize_views(views)
    cards = [
        ("Inscriptions", len(registrations)),
        ("Replays ouverts", summary["total"]),
        ("Replays terminés", summary["completed"]),
        ("Durée moyenne", format_watched(summary["average_watched"])),
    ]
    for column, (label, value) in zip(st.columns(len(cards)), cards):
        with column:
            st.markdown(_render_stat_card(label, value), unsafe_allow_html=True)

    st.subheader("Inscriptions")
    if registrations:
        st.dataframe(registration_rows(registrations, tz), use_container_width=True)
        st.subheader("Inscrits par créneau")
        st.dataframe(registrations_per_session(registrations, tz), use_container_width=True)
    else:
        st.info("Aucune inscription pour le moment.")

    st.subheader("Suivi des replays")
    if views:
        st.dataframe(view_rows(views), use_container_width=True)
    else:
        st.info("Aucun visionnage enregistré.")
