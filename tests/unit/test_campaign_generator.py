"""Unit tests for src.services.campaign_generator."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from src.config.engine_config import EngineConfig
from src.interfaces.llm_provider import ILLMProvider
from src.models.business import BusinessContext
from src.services.campaign_generator import CampaignGenerator
from src.services.provider_adapters import ProviderAdapters
from src.utils.errors import MalformedResponse, ProviderError

_CAMPAIGN = {
    "name": "Lunch Break Flow",
    "tagline": "30 minutes, zero excuses",
    "platforms": ["instagram"],
    "description": "Short midday classes for office workers.",
    "caption": "Your desk can wait. #LunchFlow",
    "hashtags": ["#LunchFlow", "#AustinYoga"],
    "bestPostTime": "11:30 AM",
    "estimatedReach": "10K - 25K",
    "duration": "2 weeks",
    "contentIdeas": ["Reel of a class", "Member story"],
}


class TestPlan:
    def test_rotation(self) -> None:
        assert CampaignGenerator.plan(0) == ("awareness", "instagram")
        assert CampaignGenerator.plan(1) == ("engagement", "facebook")
        assert CampaignGenerator.plan(6) == ("awareness", "facebook")

    def test_prompt_mentions_business(self, engine_config: EngineConfig, fitness_context: BusinessContext) -> None:
        prompt = CampaignGenerator(ProviderAdapters(engine_config), engine_config).build_prompt(fitness_context, 2)
        assert '"Iron Lotus Studio"' in prompt
        assert "sales-focused" in prompt
        assert "Platform: linkedin" in prompt
        assert "Austin" in prompt


class TestGenerateOne:
    @pytest.mark.asyncio
    async def test_parses_fenced_json(
        self,
        engine_config: EngineConfig,
        fitness_context: BusinessContext,
        mock_llm_provider: ILLMProvider,
    ) -> None:
        mock_llm_provider.complete = AsyncMock(return_value=f"```json\n{json.dumps(_CAMPAIGN)}\n```")
        generator = CampaignGenerator(ProviderAdapters(engine_config, llm=mock_llm_provider), engine_config)

        campaign = await generator.generate_one(fitness_context, 0)

        assert campaign.campaign_id == "campaign_1"
        assert campaign.name == "Lunch Break Flow"
        assert campaign.objective == "awareness"
        assert campaign.best_post_time == "11:30 AM"
        assert campaign.content_ideas == ["Reel of a class", "Member story"]

    @pytest.mark.asyncio
    async def test_missing_platforms_fall_back_to_plan(
        self,
        engine_config: EngineConfig,
        fitness_context: BusinessContext,
        mock_llm_provider: ILLMProvider,
    ) -> None:
        payload = {k: v for k, v in _CAMPAIGN.items() if k != "platforms"}
        mock_llm_provider.complete = AsyncMock(return_value=json.dumps(payload))
        generator = CampaignGenerator(ProviderAdapters(engine_config, llm=mock_llm_provider), engine_config)
        campaign = await generator.generate_one(fitness_context, 3)
        assert campaign.platforms == ["twitter"]

    @pytest.mark.asyncio
    async def test_unnamed_campaign_is_malformed(
        self,
        engine_config: EngineConfig,
        fitness_context: BusinessContext,
        mock_llm_provider: ILLMProvider,
    ) -> None:
        mock_llm_provider.complete = AsyncMock(return_value='{"tagline": "no name"}')
        generator = CampaignGenerator(ProviderAdapters(engine_config, llm=mock_llm_provider), engine_config)
        with pytest.raises(MalformedResponse):
            await generator.generate_one(fitness_context, 0)

    @pytest.mark.asyncio
    async def test_no_llm_raises_provider_error(
        self, engine_config: EngineConfig, fitness_context: BusinessContext
    ) -> None:
        generator = CampaignGenerator(ProviderAdapters(engine_config), engine_config)
        with pytest.raises(ProviderError):
            await generator.generate_one(fitness_context, 0)
