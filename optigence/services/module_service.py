"""
Module Assistant Service - One-shot prompts for the four assistant modules.

POST /optimail, /optihire, /optitrip and /optishop all share one envelope:

    {"action": "...", "emailData" | "data": {...}, "instructions": "..."}

The action picks a template from module_prompts, the data object is
rendered underneath it, and the result is sent to the preferred provider
(OpenAI unless the caller asks otherwise) with OpenAI as the fallback.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from optigence.ai.monitoring import ai_monitor
from optigence.ai.prompts.module_prompts import MODULES, build_module_prompt
from optigence.ai.providers import ProviderRegistry
from optigence.core.errors import AllSystemsFailedError, ValidationError


logger = logging.getLogger("optigence.services.modules")


@dataclass
class ModuleResult:
    action: str
    result: str
    usage: Dict[str, int]
    provider: str

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action, "result": self.result, "usage": self.usage}


class ModuleAssistant:
    """
    Usage:
        assistant = ModuleAssistant(registry)
        result = await assistant.run("optitrip", "plan", {"destination": "Lisbon"})
    """

    def __init__(self, registry: ProviderRegistry):
        self.registry = registry

    async def run(
        self,
        module: str,
        action: Optional[str],
        data: Optional[Dict[str, Any]],
        instructions: Optional[str] = None,
        preferred_provider: str = "openai",
    ) -> ModuleResult:
        """
        Raises:
            ValidationError: unknown module, missing/unknown action, missing data
            AllSystemsFailedError: every provider in the chain failed
        """
        config = MODULES.get(module)
        if config is None:
            raise ValidationError(f"Unknown module: {module}")
        if not action or not data:
            raise ValidationError("Action and data are required")

        template = config.actions.get(action)
        if template is None:
            raise ValidationError(f"Invalid action for {module}: {action}")

        request_id = str(uuid.uuid4())[:8]
        prompt = build_module_prompt(template, data, instructions)

        for provider_type, provider in self.registry.fallback_chain(preferred_provider):
            response = await provider.generate(
                prompt=prompt,
                system_prompt=config.system_prompt,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
            )
            ai_monitor.track_response(
                request_id, response, metadata={"module": module, "action": action}
            )
            if response.success:
                return ModuleResult(
                    action=action,
                    result=response.content,
                    usage=response.usage.to_dict(),
                    provider=provider_type.value,
                )
            logger.warning(f"[{request_id}] {module}/{action} failed on {provider_type.value}: {response.error}")

        raise AllSystemsFailedError(f"No provider answered {module}/{action}")
