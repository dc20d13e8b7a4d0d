"""
Ad-account provider interface and the simulated provider used until a real
Meta Ads integration is wired in.
"""

import asyncio
from typing import Optional, Protocol

from utils.logging_config import get_logger


class AdAccountCollaborator(Protocol):
    """External party that performs the actual link exchange"""

    async def request_link(self) -> bool:
        """Ask the provider to link the account; True on success"""
        ...

    async def revoke_link(self) -> bool:
        """Ask the provider to revoke the link; True on success"""
        ...


class SimulatedMetaAdsCollaborator:
    """
    Stand-in provider with a fixed delay and a scripted outcome.
    """

    def __init__(self, latency_seconds: float = 1.5, succeed: bool = True,
                 ad_account_id: Optional[str] = None):
        """
        Args:
            latency_seconds: Delay before each answer
            succeed: Outcome returned by both operations
            ad_account_id: Account id reported once linked
        """
        self.latency_seconds = latency_seconds
        self.succeed = succeed
        self.ad_account_id = ad_account_id or "337724845982980"
        self.linked_account_id: Optional[str] = None
        self.request_count = 0
        self.revoke_count = 0
        self.logger = get_logger(__name__)

    async def request_link(self) -> bool:
        self.request_count += 1
        await asyncio.sleep(self.latency_seconds)
        if self.succeed:
            self.linked_account_id = self.ad_account_id
            self.logger.info(f"Simulated link granted for ad account {self.ad_account_id}")
        else:
            self.logger.warning("Simulated link refused")
        return self.succeed

    async def revoke_link(self) -> bool:
        self.revoke_count += 1
        await asyncio.sleep(self.latency_seconds)
        if self.succeed:
            self.linked_account_id = None
        return self.succeed
