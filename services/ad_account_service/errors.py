"""
Errors raised around the ad-account link lifecycle.
"""


class LinkError(Exception):
    """Base class for ad-account link failures"""

    default_message = "Ad account link failed"

    def __init__(self, message: str = None):
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class AlreadyInProgress(LinkError):
    """connect() called while a link exchange is running"""
    default_message = "A connection attempt is already in progress"


class AlreadyConnected(LinkError):
    """connect() called while already linked"""
    default_message = "Ad account is already connected"


class NotConnected(LinkError):
    """disconnect() called without an active link"""
    default_message = "No ad account is connected"


class ExternalLinkFailure(LinkError):
    """The external provider refused or failed the exchange"""
    default_message = "Could not reach the ad account provider"
