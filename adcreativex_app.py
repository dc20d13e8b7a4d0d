import streamlit as st

from config.app_config import get_config
from services.auth_service.models import UserRole
from services.ui_service import (
    get_session_manager,
    get_ad_account_link,
    render_notifications,
    render_auth_page,
    render_profile_page,
    render_ad_account_panel,
    render_user_menu
)
from utils.logging_config import initialize_logging, get_logger

# Get configuration
config = get_config()

# Initialize logging and error tracking
error_tracker = initialize_logging(config)
logger = get_logger(__name__)


def render_diagnostics():
    """Error statistics in the sidebar (debug builds only)"""
    if not config.debug:
        return
    with st.sidebar.expander("🛠️ Diagnostics"):
        st.caption(f"Environment: {config.environment}")
        st.json(error_tracker.get_error_summary())


def main_app():
    """Application entry point: sign-in for visitors, dashboard for members"""
    st.set_page_config(page_title=config.ui.app_title, page_icon="🎬")

    manager = get_session_manager(config)

    if manager.loading:
        st.info("Loading your session...")
        return

    render_notifications()
    render_diagnostics()

    if not manager.is_authenticated:
        render_auth_page(manager)
        return

    user = manager.current_user
    render_user_menu(manager)

    st.title(f"🎬 {config.ui.app_title}")
    render_profile_page(manager)

    if user.role is UserRole.BRAND:
        st.divider()
        render_ad_account_panel(get_ad_account_link(config))


try:
    main_app()
except Exception as e:
    error_tracker.track_error(e, "main_app")
    st.error("Something went wrong. Please refresh the page.")
