"""Local SQL persistence for campaign sessions."""

from .campaign_store import SqlCampaignStore

__all__ = ["SqlCampaignStore"]
