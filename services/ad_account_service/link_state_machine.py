"""
Ad-account link state machine.

Tracks the connect/disconnect lifecycle of a brand's third-party ad account.
The state is ephemeral: it lives as long as the owning page session and is
never written to the record store.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from config.app_config import AdAccountConfig
from infrastructure.resilience.circuit_breaker import CircuitBreaker, CircuitBreakerError
from services.ad_account_service.collaborator import AdAccountCollaborator
from services.ad_account_service.errors import (
    AlreadyConnected,
    AlreadyInProgress,
    ExternalLinkFailure,
    LinkError,
    NotConnected,
)
from utils.logging_config import get_error_tracker, get_logger, log_link_event


class LinkState(str, Enum):
    """Ad-account link states"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass
class LinkResult:
    """Outcome of connect()/disconnect()"""
    success: bool
    state: LinkState
    error: Optional[LinkError] = None
    message: str = ""

    def __bool__(self) -> bool:
        return self.success


LinkListener = Callable[[LinkState], None]


class AdAccountLink:
    """
    disconnected -> connecting -> connected (collaborator success)
    connecting -> disconnected (collaborator failure)
    connected -> disconnected (disconnect)

    connect() refuses to start a second exchange while one is running or the
    account is already linked.
    """

    def __init__(self, collaborator: AdAccountCollaborator,
                 circuit_breaker: Optional[CircuitBreaker] = None,
                 provider_name: str = "Meta Ads"):
        """
        Args:
            collaborator: Provider performing the link exchange
            circuit_breaker: Guard around the provider (a default one is created if None)
            provider_name: Name used in user-facing messages
        """
        self.collaborator = collaborator
        self.provider_name = provider_name
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=3, recovery_timeout=60, name=f"{provider_name} link"
        )
        self.logger = get_logger(__name__)
        self.error_tracker = get_error_tracker()
        self._state = LinkState.DISCONNECTED
        self._listeners: List[LinkListener] = []

    @property
    def state(self) -> LinkState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is LinkState.CONNECTED

    def subscribe(self, listener: LinkListener) -> Callable[[], None]:
        """Register a listener for state transitions; returns an unsubscribe function"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, new_state: LinkState):
        old_state = self._state
        self._state = new_state
        log_link_event(self.logger, old_state.value, new_state.value, provider=self.provider_name)
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception as e:
                self.error_tracker.track_error(e, context="link_listener")

    def _refuse(self, error: LinkError) -> LinkResult:
        self.logger.warning(f"Ad-account link request refused in state {self._state.value}: {error}")
        return LinkResult(success=False, state=self._state, error=error, message=error.user_message)

    async def connect(self) -> LinkResult:
        """
        Link the ad account

        Returns:
            LinkResult; on provider failure the state is back to disconnected
            and the error is ExternalLinkFailure
        """
        if self._state is LinkState.CONNECTING:
            return self._refuse(AlreadyInProgress())
        if self._state is LinkState.CONNECTED:
            return self._refuse(AlreadyConnected())

        self._transition(LinkState.CONNECTING)
        failure = None
        try:
            linked = await self.circuit_breaker.call(self.collaborator.request_link)
            if not linked:
                failure = ExternalLinkFailure(f"{self.provider_name} declined the connection")
        except CircuitBreakerError as e:
            failure = ExternalLinkFailure(
                f"{self.provider_name} is unavailable. Try again in {e.remaining_seconds:.0f}s."
            )
        except asyncio.CancelledError:
            self.logger.warning(f"{self.provider_name} link exchange cancelled")
            self._transition(LinkState.DISCONNECTED)
            raise
        except Exception as e:
            self.error_tracker.track_error(e, context="ad_account_connect")
            failure = ExternalLinkFailure()

        if failure is not None:
            self._transition(LinkState.DISCONNECTED)
            return LinkResult(success=False, state=self._state, error=failure, message=failure.user_message)

        self._transition(LinkState.CONNECTED)
        return LinkResult(success=True, state=self._state, message=f"{self.provider_name} account connected")

    async def disconnect(self) -> LinkResult:
        """
        Unlink the ad account

        The local state becomes disconnected immediately; a failed revocation
        at the provider is reported but does not restore the link.
        """
        if self._state is not LinkState.CONNECTED:
            return self._refuse(NotConnected())

        self._transition(LinkState.DISCONNECTED)

        try:
            revoked = await self.collaborator.revoke_link()
        except Exception as e:
            self.error_tracker.track_error(e, context="ad_account_disconnect")
            revoked = False

        if not revoked:
            failure = ExternalLinkFailure(
                f"Disconnected here, but {self.provider_name} did not confirm the revocation"
            )
            return LinkResult(success=False, state=self._state, error=failure, message=failure.user_message)

        return LinkResult(success=True, state=self._state, message=f"{self.provider_name} account disconnected")


def build_ad_account_link(collaborator: AdAccountCollaborator, config: AdAccountConfig) -> AdAccountLink:
    """Create a link state machine with the configured breaker thresholds"""
    breaker = CircuitBreaker(
        failure_threshold=config.failure_threshold,
        recovery_timeout=config.recovery_timeout,
        name=f"{config.provider_name} link"
    )
    return AdAccountLink(collaborator, breaker, provider_name=config.provider_name)
