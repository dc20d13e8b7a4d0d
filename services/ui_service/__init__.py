"""
UI service - Streamlit views over the session and ad-account services.
"""

from .auth_views import (
    get_session_manager,
    get_ad_account_link,
    render_notifications,
    render_auth_page,
    render_profile_page,
    render_ad_account_panel,
    render_user_menu
)

__all__ = [
    'get_session_manager',
    'get_ad_account_link',
    'render_notifications',
    'render_auth_page',
    'render_profile_page',
    'render_ad_account_panel',
    'render_user_menu'
]
