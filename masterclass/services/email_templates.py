"""HTML email content for confirmations, reminders and admin notices."""
from datetime import datetime
from typing import List, Optional, Tuple

from masterclass.models.registration import Registration
from masterclass.models.reminder import ReminderJob
from masterclass.services.scheduler_service import REMINDER_OFFSETS
from masterclass.utils.date_utils import format_session_fr
from masterclass.utils.html_utils import html_block, text

EmailContent = Tuple[str, str]

SIGNATURE_TITLE = "Médium‑thérapeute, accompagnatrice des parents et futurs parents"


def _link(url: str) -> str:
    safe = text(url)
    return f'<a href="{safe}">{safe}</a>'


def confirmation_email(first_name: str, join_link: str, webinar_title: str) -> EmailContent:
    subject = f"✨ Ton voyage commence — Masterclass {webinar_title}"
    body = html_block(f"""
        <p>Bonjour {text(first_name)},</p>
        <p>🌸 Ton rendez‑vous est confirmé&nbsp;!</p>
        <p>Tu viens d’ouvrir une porte. Une porte vers un espace sacré, un moment hors du temps… Ce sera un instant précieux où nous explorerons ensemble 3 clefs essentielles pour aller à la rencontre de ton enfant et mieux le comprendre.</p>
        <p>Tu pourras te connecter à la Masterclass via ce lien&nbsp;:<br/>{_link(join_link)}</p>
        <p>Je t’invite à créer, chez toi, un petit cocon pour ce moment&nbsp;: une bougie, un carnet, un espace calme, et l’envie de plonger dans cette connexion intime entre toi et ton enfant.</p>
        <p>Avec toute ma douceur,</p>
        <p>Laurence<br/>{SIGNATURE_TITLE}</p>
    """)
    return subject, body


def _day_before(first_name: str, join_link: str, session_label: str) -> EmailContent:
    return "✨ C’est demain — ta Masterclass", html_block(f"""
        <p>Coucou {text(first_name)},</p>
        <p>Demain ({session_label}) nous partagerons un moment sacré pour accueillir l’Âme de ton enfant. Prépare un endroit calme et de quoi prendre des notes.</p>
        <p>Lien d’accès&nbsp;: {_link(join_link)}</p>
        <p>À très vite,<br/>Laurence</p>
    """)


def _same_day(first_name: str, join_link: str) -> EmailContent:
    return "✨ C’est aujourd’hui — ta Masterclass", html_block(f"""
        <p>Coucou {text(first_name)},</p>
        <p>Le moment est arrivé… aujourd’hui, nous allons nous retrouver pour un temps sacré, un espace hors du quotidien, afin d’explorer ensemble les 3 clefs majeures pour accueillir l’Âme de ton enfant.</p>
        <p>Tu pourras te connecter ici&nbsp;: {_link(join_link)}</p>
        <p>Prépare un petit cocon&nbsp;: un coin tranquille, peut-être une bougie, un plaid, un carnet… et surtout ta pleine attention.</p>
        <p>🌸 Dans quelques heures, nous franchirons ensemble ce portail.</p>
        <p>Avec toute ma douceur,<br/>Laurence</p>
    """)


def _one_hour(first_name: str, join_link: str) -> EmailContent:
    return "⏳ Dans 1 heure, nous ouvrons ensemble ce Portail vers l’Âme", html_block(f"""
        <p>Coucou {text(first_name)},</p>
        <p>Nous nous retrouvons dans moins d’une heure&nbsp;! Profite de ce moment pour ralentir, écouter et ressentir ta flamme intérieure. C’est elle qui te permettra de t’ouvrir à l’Âme de ton enfant 😊</p>
        <p>📍 Lien d’accès&nbsp;: {_link(join_link)}</p>
        <p>Je me réjouis de t’offrir ce cadeau,<br/>À tout à l’heure,<br/>Laurence</p>
    """)


def _half_hour(first_name: str, join_link: str) -> EmailContent:
    return "🔔 Dans 30 minutes, nous commençons notre voyage sacré", html_block(f"""
        <p>Coucou {text(first_name)}&nbsp;!</p>
        <p>Nous y sommes presque… Un temps pour toi, que tu sois sur le chemin de la parentalité ou déjà parent, tu vas pouvoir te reconnecter à l’essence de ce lien sacré.</p>
        <p>📍 Lien d’accès&nbsp;: {_link(join_link)}</p>
        <p>🌸 Ce moment est pour toi… et pour lui.<br/>À tout à l’heure,<br/>Avec toute ma douceur,<br/>Laurence</p>
    """)


def _follow_up(first_name: str, webinar_title: str, booking_url: str) -> EmailContent:
    return "💖 Merci… et un pas de plus vers toi et ton enfant", html_block(f"""
        <p>Bonjour {text(first_name)},</p>
        <p>Merci d’avoir partagé ce moment avec moi lors de la Masterclass “{text(webinar_title)}”. J’espère que ces instants t’ont offert douceur, clarté et peut-être même quelques prises de conscience profondes.</p>
        <p>Que tu sois en chemin vers la parentalité ou déjà parent, je souhaite que ces 3 clefs t’accompagnent&nbsp;:</p>
        <ul>
        <li>Cultiver un lien d’âme à âme avec ton enfant, qu’il soit à naître ou déjà là</li>
        <li>Apaiser tes peurs et nourrir ta confiance</li>
        <li>Créer un environnement d’amour et de sérénité autour de lui… et autour de toi</li>
        </ul>
        <p>🌸 Ce voyage ne fait que commencer.</p>
        <p>Si tu ressens l’élan de poursuivre, je t’offre un appel découverte de 30&nbsp;minutes, entièrement gratuit, pour échanger sur ta situation, tes besoins et voir comment je peux t’accompagner plus en profondeur.</p>
        <p>📅 Réserve ton créneau ici&nbsp;: {_link(booking_url)}</p>
        <p>Je serai heureuse de t’entendre, de répondre à tes questions et, peut-être, de marcher à tes côtés dans ce chapitre si précieux de ta vie.</p>
        <p>Avec toute ma douceur et ma gratitude,<br/>Laurence<br/>{SIGNATURE_TITLE}</p>
    """)


def reminder_jobs(
    registration: Registration,
    join_link: str,
    webinar_title: str,
    booking_url: str,
    tz: str = "Europe/Paris",
) -> List[ReminderJob]:
    """
    Build the reminder sequence for one registrant.

    Returns:
        One ReminderJob per entry of REMINDER_OFFSETS, in the same order
    """
    first_name = registration.first_name
    session_label = format_session_fr(registration.session_time, tz)
    contents = [
        _day_before(first_name, join_link, session_label),
        _same_day(first_name, join_link),
        _one_hour(first_name, join_link),
        _half_hour(first_name, join_link),
        _follow_up(first_name, webinar_title, booking_url),
    ]
    return [
        ReminderJob(offset=offset, recipient=registration.email, subject=subject, body=body)
        for offset, (subject, body) in zip(REMINDER_OFFSETS, contents)
    ]


def admin_email(
    registration: Registration,
    session_time: datetime,
    tz: str = "Europe/Paris",
    ledger_link: Optional[str] = None,
) -> EmailContent:
    """Notice to the organisers that someone signed up."""
    ledger_html = ""
    if ledger_link:
        ledger_html = f"<p>Base Airtable des inscriptions&nbsp;: {_link(ledger_link)}</p>"

    body = html_block(f"""
        <p>Une nouvelle personne s'est inscrite à la masterclass.</p>
        <p><strong>Prénom&nbsp;:</strong> {text(registration.first_name)}<br/>
        <strong>Nom&nbsp;:</strong> {text(registration.last_name)}<br/>
        <strong>Email&nbsp;:</strong> {text(registration.email)}<br/>
        <strong>Créneau choisi&nbsp;:</strong> {format_session_fr(session_time, tz)}</p>
        {ledger_html}
    """)
    return "Nouvelle inscription à la masterclass", body
