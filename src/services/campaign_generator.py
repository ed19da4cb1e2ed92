"""Campaign idea generation, one campaign per LLM call.

Campaigns are generated individually so the streaming path can emit each
one as soon as it is ready.  Objectives and lead platforms rotate with the
campaign index to keep a batch varied.  A failed generation raises a
domain error; callers decide whether that becomes an ``item-error`` event
or an entry in ``DiscoveryResult.errors``.
"""

from __future__ import annotations

from typing import Any

from src.config.engine_config import EngineConfig
from src.models.business import BusinessContext
from src.models.campaign import CampaignIdea
from src.services.provider_adapters import ProviderAdapters
from src.utils.errors import MalformedResponse, ProviderError
from src.utils.json_extraction import extract_json
from src.utils.logging import get_logger

OBJECTIVES: tuple[str, ...] = ("awareness", "engagement", "sales", "traffic", "trust", "conversion")
PLATFORM_ROTATION: tuple[str, ...] = ("instagram", "facebook", "linkedin", "twitter", "youtube")

_SYSTEM_PROMPT = (
    "You are a senior social media strategist. You write concrete, ready-to-run "
    "campaigns and answer with JSON only, no markdown."
)


def _as_str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(v) for v in value if isinstance(v, (str, int, float)) and str(v).strip()]
    return []


class CampaignGenerator:
    """Generates :class:`CampaignIdea` objects through the text-generation provider."""

    def __init__(self, adapters: ProviderAdapters, config: EngineConfig) -> None:
        self._adapters = adapters
        self._config = config
        self._logger = get_logger(__name__)

    @staticmethod
    def plan(index: int) -> tuple[str, str]:
        """(objective, lead platform) for the campaign at ``index``."""
        return OBJECTIVES[index % len(OBJECTIVES)], PLATFORM_ROTATION[index % len(PLATFORM_ROTATION)]

    def build_prompt(self, context: BusinessContext, index: int) -> str:
        objective, platform = self.plan(index)
        company = context.name or "Your Company"
        industry = context.industry or "General"
        niche = context.niche or industry
        voice = context.brand_voice or "Professional"
        goals = ", ".join(context.marketing_goals) or "Brand awareness"
        return (
            f'Generate ONE {objective}-focused social media campaign for "{company}" '
            f"({industry}/{niche}).\n\n"
            f"Target: {context.target_audience or 'General consumers'}\n"
            f"Voice: {voice}\n"
            f"Platform: {platform}\n"
            f"Goals: {goals}\n"
            f"Location: {context.location() or 'not specified'}\n\n"
            "Return ONLY valid JSON:\n"
            "{\n"
            '  "name": "Campaign title",\n'
            '  "tagline": "Short hook",\n'
            f'  "objective": "{objective}",\n'
            f'  "platforms": ["{platform}"],\n'
            '  "description": "2-3 sentences on the idea",\n'
            f'  "caption": "Ready-to-post caption in a {voice} voice with a call-to-action",\n'
            '  "hashtags": ["#Brand", "#Industry"],\n'
            '  "bestPostTime": "9:00 AM",\n'
            '  "estimatedReach": "10K - 25K",\n'
            '  "duration": "2 weeks",\n'
            '  "contentIdeas": ["idea 1", "idea 2", "idea 3"]\n'
            "}"
        )

    async def generate_one(self, context: BusinessContext, index: int) -> CampaignIdea:
        """Generate the campaign at ``index``.

        Raises
        ------
        src.utils.errors.GravityError
            ProviderError / ProviderTimeout from the provider, or
            MalformedResponse when the answer holds no usable campaign.
        """
        objective, platform = self.plan(index)
        result = await self._adapters.generate_text(
            _SYSTEM_PROMPT,
            self.build_prompt(context, index),
            timeout=self._config.campaign_timeout_seconds,
            temperature=0.9,
            max_tokens=1024,
        )
        if not result.ok:
            raise result.error or ProviderError(provider_name=result.provider_name)

        data = extract_json(result.value, expect=dict)
        if data is None or not str(data.get("name") or "").strip():
            raise MalformedResponse(
                message=f"campaign {index + 1} response has no campaign object",
                provider_name=result.provider_name,
            )

        campaign = CampaignIdea(
            campaign_id=str(data.get("id") or f"campaign_{index + 1}"),
            name=str(data["name"]).strip(),
            tagline=str(data.get("tagline") or ""),
            objective=str(data.get("objective") or objective),
            platforms=_as_str_list(data.get("platforms")) or [platform],
            description=str(data.get("description") or ""),
            caption=str(data.get("caption") or ""),
            hashtags=_as_str_list(data.get("hashtags")),
            best_post_time=str(data.get("bestPostTime") or data.get("best_post_time") or ""),
            estimated_reach=str(data.get("estimatedReach") or data.get("estimated_reach") or ""),
            duration=str(data.get("duration") or ""),
            content_ideas=_as_str_list(data.get("contentIdeas") or data.get("content_ideas")),
        )
        self._logger.debug("campaign_generated", index=index, objective=campaign.objective)
        return campaign
