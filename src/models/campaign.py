"""Campaign idea model produced by the campaign generator."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CampaignIdea(BaseModel):
    """One ready-to-run marketing campaign suggestion."""

    model_config = ConfigDict(frozen=True)

    campaign_id: str
    name: str
    tagline: str = ""
    objective: str = ""
    platforms: list[str] = Field(default_factory=list)
    description: str = ""
    caption: str = ""
    hashtags: list[str] = Field(default_factory=list)
    best_post_time: str = ""
    estimated_reach: str = ""
    duration: str = ""
    content_ideas: list[str] = Field(default_factory=list)
