"""
Streamlit views over the session manager: sign-in, registration, profile and ad-account panels.
"""

import asyncio
from typing import Optional

import streamlit as st

from config.app_config import AppConfig, get_config
from services.ad_account_service.collaborator import SimulatedMetaAdsCollaborator
from services.ad_account_service.link_state_machine import AdAccountLink, LinkState, build_ad_account_link
from services.auth_service.models import Notification, UserRecord, UserRole
from services.auth_service.profile_validation import profile_form_to_patch, validate_profile_form
from services.auth_service.session_manager import SessionManager, build_session_manager
from utils.logging_config import get_logger

logger = get_logger(__name__)

SESSION_MANAGER_KEY = "session_manager"
AD_ACCOUNT_LINK_KEY = "ad_account_link"
PENDING_NOTIFICATIONS_KEY = "pending_notifications"


def get_session_manager(config: Optional[AppConfig] = None) -> SessionManager:
    """
    Get the session manager owned by this browser session, creating and
    initializing it on first use
    """
    if SESSION_MANAGER_KEY not in st.session_state:
        manager = build_session_manager(config or get_config())
        manager.add_notifier(_queue_notification)
        asyncio.run(manager.initialize())
        st.session_state[SESSION_MANAGER_KEY] = manager
        logger.info("Session manager created for browser session")
    return st.session_state[SESSION_MANAGER_KEY]


def get_ad_account_link(config: Optional[AppConfig] = None) -> AdAccountLink:
    """Get the ad-account link state machine owned by this browser session"""
    if AD_ACCOUNT_LINK_KEY not in st.session_state:
        config = config or get_config()
        collaborator = SimulatedMetaAdsCollaborator(latency_seconds=config.ad_account.link_latency_seconds)
        st.session_state[AD_ACCOUNT_LINK_KEY] = build_ad_account_link(collaborator, config.ad_account)
    return st.session_state[AD_ACCOUNT_LINK_KEY]


def _queue_notification(notification: Notification):
    st.session_state.setdefault(PENDING_NOTIFICATIONS_KEY, []).append(notification)


def render_notifications():
    """Show queued notifications as toasts"""
    if not get_config().ui.show_notifications:
        st.session_state.pop(PENDING_NOTIFICATIONS_KEY, None)
        return

    for notification in st.session_state.pop(PENDING_NOTIFICATIONS_KEY, []):
        icon = "❌" if notification.is_error else "✅"
        st.toast(f"**{notification.title}** - {notification.description}", icon=icon)


def render_login_tab(manager: SessionManager):
    """Render login form"""
    with st.form("login_form"):
        st.subheader("Sign In")

        email = st.text_input("📧 Email", placeholder="you@company.com")
        password = st.text_input("🔒 Password", type="password", placeholder="Enter your password")

        if st.form_submit_button("🔑 Sign In", type="primary", use_container_width=True):
            with st.spinner("Signing in..."):
                result = asyncio.run(manager.login(email, password))
            if result:
                st.rerun()
            else:
                st.error(f"❌ {result.message}")


def render_register_tab(manager: SessionManager):
    """Render registration form"""
    role_label = st.radio("I am a", ["Brand", "Creator"], horizontal=True, key="register_role")
    role = UserRole.BRAND if role_label == "Brand" else UserRole.CREATOR

    with st.form("register_form"):
        st.subheader("Create Account")

        email = st.text_input("📧 Email", placeholder="you@company.com")
        password = st.text_input("🔒 Password", type="password")
        name = st.text_input("👤 Name")

        profile = {"name": name}
        if role is UserRole.BRAND:
            profile["companyName"] = st.text_input("🏢 Company name")
            profile["industry"] = st.text_input("🏷️ Industry")
            profile["website"] = st.text_input("🌐 Website", placeholder="https://example.com")
        else:
            profile["specialty"] = st.text_input("🎬 Specialty")
            profile["portfolioLink"] = st.text_input("🔗 Portfolio link", placeholder="https://example.com")

        if st.form_submit_button("📝 Create Account", type="primary", use_container_width=True):
            # Blank optional inputs are not stored
            profile = {key: value for key, value in profile.items() if value}
            with st.spinner("Creating your account..."):
                result = asyncio.run(manager.register(email, password, role, profile))
            if result:
                st.rerun()
            else:
                st.error(f"❌ {result.message}")


def render_auth_page(manager: SessionManager):
    """Render login/registration page for anonymous visitors"""
    config = get_config()
    st.title(f"🔐 {config.ui.app_title}")
    st.caption(config.ui.tagline)

    login_tab, register_tab = st.tabs(["🔑 Login", "📝 Register"])
    with login_tab:
        render_login_tab(manager)
    with register_tab:
        render_register_tab(manager)


def _profile_defaults(user: UserRecord) -> dict:
    if user.role is UserRole.BRAND:
        return {
            "companyName": user.company_name or "",
            "industry": user.industry or "",
            "website": user.website or "",
            "bio": user.bio or "",
        }
    return {
        "name": user.name or "",
        "specialty": user.specialty or "",
        "portfolioLink": user.portfolio_link or "",
        "bio": user.bio or "",
    }


_FIELD_LABELS = {
    "companyName": "Company Name",
    "industry": "Industry",
    "website": "Website",
    "name": "Name",
    "specialty": "Specialty",
    "portfolioLink": "Portfolio Link",
}


def render_profile_page(manager: SessionManager):
    """Render profile settings for the logged-in user"""
    user = manager.current_user
    if user is None:
        return

    st.header("Profile Settings")
    st.caption("Manage your account information")

    defaults = _profile_defaults(user)
    with st.form("profile_form"):
        values = {}
        for key, default in defaults.items():
            if key == "bio":
                values[key] = st.text_area("Bio", value=default, placeholder="Tell us about yourself")
            else:
                values[key] = st.text_input(_FIELD_LABELS[key], value=default)

        if st.form_submit_button("Save Changes", type="primary"):
            errors = validate_profile_form(user.role, values)
            if errors:
                for field, message in errors.items():
                    st.error(f"{_FIELD_LABELS.get(field, field)}: {message}")
                return

            with st.spinner("Saving..."):
                result = asyncio.run(manager.update_profile(profile_form_to_patch(user.role, values)))
            if result:
                st.rerun()
            else:
                st.error(f"❌ {result.message}")


def render_ad_account_panel(link: AdAccountLink):
    """Render the ad-account connection panel (brand accounts)"""
    st.subheader(f"📈 {link.provider_name} Account")

    if link.state is LinkState.CONNECTED:
        st.success("Connected - ad spend will sync into your dashboard.")
        if st.button("Disconnect", key="ad_account_disconnect"):
            result = asyncio.run(link.disconnect())
            if not result:
                st.warning(result.message)
            st.rerun()
    else:
        st.info("Connect your ad account to see campaign spend and revenue.")
        if st.button("Connect", key="ad_account_connect", type="primary"):
            with st.spinner(f"Connecting to {link.provider_name}..."):
                result = asyncio.run(link.connect())
            if result:
                st.rerun()
            else:
                st.error(f"❌ {result.message}")


def render_user_menu(manager: SessionManager):
    """Render user menu in sidebar"""
    user = manager.current_user
    if user is None:
        return

    with st.sidebar:
        st.divider()
        st.subheader("👤 User Account")
        st.write(f"**Welcome, {user.display_name}!**")
        st.write(f"Account type: {user.role.value.title()}")

        if st.button("🚪 Logout", use_container_width=True):
            asyncio.run(manager.logout())
            st.session_state.pop(AD_ACCOUNT_LINK_KEY, None)
            st.rerun()
