"""
Tests for the module assistants (OptiMail, OptiHire, OptiTrip, OptiShop).
"""

import pytest

from optigence.ai.prompts.module_prompts import MODULES, build_module_prompt
from optigence.ai.providers import ProviderRegistry
from optigence.ai.providers.base import ProviderType
from optigence.core.errors import AllSystemsFailedError, ValidationError
from optigence.services.module_service import ModuleAssistant


@pytest.fixture
def assistant(registry):
    return ModuleAssistant(registry)


class TestModulePrompts:
    """Action templates and data rendering."""

    def test_module_actions(self):
        assert set(MODULES["optitrip"].actions) == {"plan", "recommend", "budget", "itinerary", "local", "social"}
        assert set(MODULES["optishop"].actions) == {"search", "compare", "recommend", "analyze", "wishlist"}
        assert "tone_analysis" in MODULES["optimail"].actions
        assert "coverletter" in MODULES["optihire"].actions

    def test_generation_settings(self):
        assert (MODULES["optimail"].temperature, MODULES["optimail"].max_tokens) == (0.8, 1500)
        assert (MODULES["optihire"].temperature, MODULES["optihire"].max_tokens) == (0.7, 1000)

    def test_build_prompt(self):
        template = MODULES["optitrip"].actions["plan"]

        prompt = build_module_prompt(
            template,
            {"destination": "Lisbon", "travelDates": "May", "interests": ["food", "music"], "budget": ""},
            instructions="Keep it cheap",
        )

        assert prompt.startswith(template.task)
        assert "Destination: Lisbon" in prompt
        assert "Travel dates: May" in prompt
        assert "Interests: food, music" in prompt
        assert "Budget:" not in prompt
        assert "Additional instructions: Keep it cheap" in prompt
        assert "Please provide:\n1. " in prompt


class TestModuleAssistant:
    """ModuleAssistant.run validation and provider chain."""

    @pytest.mark.asyncio
    async def test_runs_on_preferred_provider(self, assistant, mock_providers):
        result = await assistant.run("optitrip", "plan", {"destination": "Lisbon"}, preferred_provider="claude")

        assert result.result == "Claude draft"
        assert result.provider == "anthropic"
        assert result.usage == {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30}
        assert result.to_dict() == {"action": "plan", "result": "Claude draft", "usage": result.usage}

        kwargs = mock_providers[ProviderType.ANTHROPIC].generate.call_args.kwargs
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 1000
        assert kwargs["system_prompt"] == MODULES["optitrip"].system_prompt

    @pytest.mark.asyncio
    async def test_defaults_to_openai(self, assistant):
        result = await assistant.run("optishop", "compare", {"products": ["A", "B"]})

        assert result.provider == "openai"

    @pytest.mark.asyncio
    async def test_falls_back_to_openai(self, provider_factory):
        registry = ProviderRegistry({
            ProviderType.GEMINI: provider_factory(ProviderType.GEMINI, success=False, error="quota"),
            ProviderType.OPENAI: provider_factory(ProviderType.OPENAI, "OpenAI answer"),
        })

        result = await ModuleAssistant(registry).run("optihire", "resume", {"role": "Engineer"}, "gemini")

        assert result.result == "OpenAI answer"
        assert result.provider == "openai"

    @pytest.mark.asyncio
    async def test_all_failed(self, provider_factory):
        registry = ProviderRegistry({
            ProviderType.OPENAI: provider_factory(ProviderType.OPENAI, success=False, error="down"),
        })

        with pytest.raises(AllSystemsFailedError):
            await ModuleAssistant(registry).run("optimail", "compose", {"purpose": "Intro"})

    @pytest.mark.parametrize(
        "module,action,data,message",
        [
            ("optinothing", "plan", {"a": 1}, "Unknown module: optinothing"),
            ("optitrip", None, {"a": 1}, "Action and data are required"),
            ("optitrip", "plan", {}, "Action and data are required"),
            ("optitrip", "teleport", {"a": 1}, "Invalid action for optitrip: teleport"),
        ],
    )
    @pytest.mark.asyncio
    async def test_validation(self, assistant, mock_providers, module, action, data, message):
        with pytest.raises(ValidationError) as exc_info:
            await assistant.run(module, action, data)

        assert exc_info.value.message == message
        assert exc_info.value.status_code == 400
        mock_providers[ProviderType.OPENAI].generate.assert_not_awaited()
