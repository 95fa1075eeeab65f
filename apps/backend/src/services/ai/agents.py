"""Blueprint architect agent."""

import logging

from pydantic_ai import Agent
from pydantic_ai.models import Model


logger = logging.getLogger(__name__)


BLUEPRINT_SYSTEM_PROMPT = """
You are a senior software architect. Turn the user's project idea into a
complete, execution-ready architecture blueprint.

Respond with ONE JSON object and nothing else, using exactly these keys:

{
  "projectAnalysis": {
    "objective": "string",
    "type": "string",
    "complexity": "beginner|intermediate|advanced",
    "domains": ["string"]
  },
  "skillTree": [
    {"category": "string", "skills": [{"name": "string", "subskills": ["string"]}]}
  ],
  "knowledgeChecklist": [{"module": "string", "items": ["string"]}],
  "moduleArchitecture": [
    {
      "name": "string",
      "purpose": "string",
      "dependencies": ["string"],
      "inputs": ["string"],
      "outputs": ["string"]
    }
  ],
  "executionRoadmap": [{"step": 1, "title": "string", "description": "string"}],
  "folderStructure": "string (tree, one path per line)",
  "taskBreakdown": [{"module": "string", "tasks": ["string"]}]
}

RULES:
- Be specific, actionable and dependency-aware; order the roadmap so that
  every step only relies on earlier steps.
- Output raw JSON only: no Markdown code fences, no preamble, no closing remarks.
- Never put a literal line break inside a string value. Write the two
  characters \\n instead, especially in folderStructure.
"""


def build_user_prompt(project_idea: str) -> str:
    return (
        f"Project Idea: {project_idea}\n\n"
        "Generate a complete project architecture blueprint."
    )


def create_blueprint_agent(model: Model | str | None = None) -> Agent[None, str]:
    """Create the pydantic-ai agent that streams blueprint text.

    The output type is plain text: the response is streamed token by token to
    the client, which reassembles and parses the JSON itself.
    """
    if model is None:
        from services.ai.model_factory import get_chat_model

        model = get_chat_model()
    return Agent(model, system_prompt=BLUEPRINT_SYSTEM_PROMPT, output_type=str)
