# backend/app/agents/title_agent.py

import logging
from typing import List

from ..errors import InvalidInput
from ..normalizer import get_str_list, parse_json
from ..provider_client import ProviderClient

log = logging.getLogger("tubemaster")


async def generate_titles(client: ProviderClient, topic: str) -> List[str]:
    if not (topic or "").strip():
        raise InvalidInput("Enter a topic for the titles.")

    prompt = f'Generate 10 click-worthy titles for: "{topic.strip()}". JSON object with key "titles".'
    raw = parse_json(await client.ask_brain(prompt))
    titles = get_str_list(raw, "titles")
    log.info(f"✅ Generated {len(titles)} titles")
    return titles


async def suggest_best_time(
    client: ProviderClient,
    title: str,
    audience: str = "General Audience",
    tags: str = "",
) -> str:
    """Narrative answer, so the brain runs in free-text mode."""
    if not (title or "").strip():
        raise InvalidInput("Enter a video title.")

    prompt = f'Best time to publish: "{title.strip()}" for "{(audience or "General Audience").strip()}".'
    if tags and tags.strip():
        prompt += f" Tags: {tags.strip()}."
    prompt += " Explain why."

    answer = await client.ask_brain(prompt, json_mode=False)
    return answer.strip()
