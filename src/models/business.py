"""Business profile model -- the input to every discovery request.

BusinessContext is frozen: the engine reads it to build keywords, prompts
and the cache fingerprint, and never mutates it.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BusinessContext(BaseModel):
    """Descriptive facts about the business being marketed.

    Every field is optional; missing values are treated as empty strings by
    the fingerprint and keyword builders.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    industry: str = ""
    niche: str = ""
    description: str = ""
    target_audience: str = ""
    brand_voice: str = ""
    region: str = ""
    country: str = ""
    city: str = ""
    # Free-form goals such as "brand awareness" or "lead generation".
    marketing_goals: list[str] = Field(default_factory=list)
    # Names or handles of known competitors, seeded into competitor search.
    competitors: list[str] = Field(default_factory=list)

    def location(self) -> str:
        """Most specific location available, joined as ``city, country``."""
        parts = [p for p in (self.city, self.region, self.country) if p]
        return ", ".join(parts)
