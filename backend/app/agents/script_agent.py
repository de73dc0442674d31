# backend/app/agents/script_agent.py

import logging

from ..errors import InvalidInput
from ..models import ScriptResponse, ScriptSection
from ..normalizer import get_list, get_str, parse_json
from ..provider_client import ProviderClient

log = logging.getLogger("tubemaster")

LOGIC_STEPS = [
    "Hook",
    "Stakes",
    "Context",
    "Twist",
    "Value",
    "Retention Spike",
    "Emotion",
    "Re-engagement",
    "Payoff",
]

SCRIPT_PROMPT = """Write a YouTube script for "{title}" targeting "{audience}".
Logic sections: {steps}.
Return strictly JSON with keys: title, estimatedDuration, targetAudience, sections (array).
Each section has keys: title, content, duration, visualCue, logicStep, psychologicalTrigger."""


async def generate_script(client: ProviderClient, title: str, audience: str = "General Audience") -> ScriptResponse:
    """
    Nine-step retention script. The model decides the wording; we only
    project its JSON into ScriptResponse, filling any gaps from the request.
    """
    if not (title or "").strip():
        raise InvalidInput("Enter a video title to script.")
    audience = (audience or "").strip() or "General Audience"

    log.info(f"📝 Generating script for {title!r}")
    prompt = SCRIPT_PROMPT.format(title=title.strip(), audience=audience, steps=", ".join(LOGIC_STEPS))
    raw = parse_json(await client.ask_brain(prompt))

    sections = [
        ScriptSection(
            title=get_str(s, "title"),
            content=get_str(s, "content"),
            duration=get_str(s, "duration"),
            visual_cue=get_str(s, "visualCue", "visual_cue"),
            logic_step=get_str(s, "logicStep", "logic_step"),
            psychological_trigger=get_str(s, "psychologicalTrigger", "psychological_trigger"),
        )
        for s in get_list(raw, "sections")
        if isinstance(s, dict)
    ]

    return ScriptResponse(
        title=get_str(raw, "title") or title.strip(),
        estimated_duration=get_str(raw, "estimatedDuration", "estimated_duration"),
        target_audience=get_str(raw, "targetAudience", "target_audience") or audience,
        sections=sections,
    )
