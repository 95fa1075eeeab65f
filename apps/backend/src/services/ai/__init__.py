"""LLM services for blueprint generation."""

from .agents import BLUEPRINT_SYSTEM_PROMPT, build_user_prompt, create_blueprint_agent
from .token_source import BlueprintTokenSource


__all__ = [
    "BLUEPRINT_SYSTEM_PROMPT",
    "BlueprintTokenSource",
    "build_user_prompt",
    "create_blueprint_agent",
]
