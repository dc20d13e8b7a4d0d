"""
Ad-account service - links a brand profile to an external ad-performance provider.
"""

from .collaborator import AdAccountCollaborator, SimulatedMetaAdsCollaborator
from .errors import AlreadyConnected, AlreadyInProgress, ExternalLinkFailure, LinkError, NotConnected
from .link_state_machine import AdAccountLink, LinkResult, LinkState, build_ad_account_link

__all__ = [
    'AdAccountCollaborator',
    'SimulatedMetaAdsCollaborator',
    'AlreadyConnected',
    'AlreadyInProgress',
    'ExternalLinkFailure',
    'LinkError',
    'NotConnected',
    'AdAccountLink',
    'LinkResult',
    'LinkState',
    'build_ad_account_link'
]
