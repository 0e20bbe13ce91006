"""HTTP clients for the Delegate backend (generator, voice, persistence)."""

from .base import DelegateApiClient
from .campaign_api import CampaignServiceClient
from .voice import VoiceServiceClient

__all__ = ["CampaignServiceClient", "DelegateApiClient", "VoiceServiceClient"]
