"""
Masterclass admin dashboard
Run with: streamlit run app.py
"""
import logging

import streamlit as st

from masterclass.config import load_settings
from masterclass.services.registration_service import load_registrations
from masterclass.services.storage_service import JsonFileStore
from masterclass.services.tracking_service import TrackingService
from masterclass.ui.admin_dashboard import render_admin_dashboard

logger = logging.getLogger(__name__)


st.set_page_config(
    page_title="Masterclass · Administration",
    page_icon="🌸",
    layout="wide",
    initial_sidebar_state="collapsed"
)


def apply_custom_css():
    """Apply dashboard styles."""
    st.markdown("""
        <style>
        .stApp {
            background: linear-gradient(135deg, #0f0c29 0%, #1a1a2e 50%, #16213e 100%);
        }
        #MainMenu {visibility: hidden;}
        footer {visibility: hidden;}
        </style>
    """, unsafe_allow_html=True)


def main():
    """Dashboard entry point."""
    settings = load_settings()
    apply_custom_css()

    try:
        registrations = load_registrations(JsonFileStore(settings.registrations_file, list))
        views = TrackingService(JsonFileStore(settings.views_file, dict)).get_all_views()
        render_admin_dashboard(registrations, views, settings.site_timezone)
    except Exception as e:
        logger.exception("Unhandled exception while rendering dashboard")
        st.error("Impossible de charger les données, merci de recharger la page.")
        st.code(str(e))

    if st.button("🔄 Rafraîchir"):
        st.rerun()


if __name__ == "__main__":
    main()
