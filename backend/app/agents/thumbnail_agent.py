# backend/app/agents/thumbnail_agent.py

import logging
import random
import time
from typing import Optional
from urllib.parse import quote, urlencode

from ..errors import InvalidInput, MissingCredential, ProviderError
from ..models import ThumbnailGenResult
from ..provider_client import ProviderClient

log = logging.getLogger("tubemaster")

STYLES = {
    "realistic": "Hyper Realistic",
    "3d": "3D Render",
    "cinematic": "Cinematic",
    "anime": "Anime / Drawn",
    "minimalist": "Minimalist",
    "cyberpunk": "Neon / Cyber",
}
MOODS = ["Exciting", "Happy", "Serious", "Mystery", "Educational"]

IMAGE_WIDTH = 1280
IMAGE_HEIGHT = 720
IMAGE_MODEL = "flux"


def build_image_url(base_url: str, prompt: str, seed: int) -> str:
    params = urlencode(
        {
            "width": IMAGE_WIDTH,
            "height": IMAGE_HEIGHT,
            "seed": seed,
            "model": IMAGE_MODEL,
            "nologo": "true",
        }
    )
    return f"{base_url}{quote(prompt, safe='')}?{params}"


async def optimize_prompt(client: ProviderClient, prompt: str, style: str, mood: str) -> str:
    answer = await client.ask_brain(
        f'Rewrite this image prompt for high-CTR. Style: {style}. Mood: {mood}. Original: "{prompt}". Output ONLY prompt.',
        json_mode=False,
    )
    return answer.strip().strip('"') or prompt


async def generate_thumbnail(
    client: ProviderClient,
    prompt: str,
    style: str = "realistic",
    mood: str = "Exciting",
    optimize: bool = True,
    rng: Optional[random.Random] = None,
) -> ThumbnailGenResult:
    """
    Build a Pollinations (Flux) image URL for the prompt.

    The URL is the result: the image itself is rendered by whoever displays it.
    Optimization is best-effort; if the brain call fails we keep the user's
    prompt.
    """
    if not (prompt or "").strip():
        raise InvalidInput("Describe the thumbnail you want to generate.")
    prompt = prompt.strip()
    style = style if style in STYLES else "realistic"
    mood = mood if mood in MOODS else "Exciting"

    final_prompt = prompt
    if optimize:
        try:
            final_prompt = await optimize_prompt(client, prompt, STYLES[style], mood)
        except (ProviderError, MissingCredential) as e:
            log.warning(f"⚠️ Prompt optimization failed, using original prompt: {e}")

    seed = (rng or random).randint(0, 999_999)
    image_url = build_image_url(client.settings.image_api_url, final_prompt, seed)
    log.info(f"🎨 Thumbnail URL ready (style={style}, seed={seed})")

    return ThumbnailGenResult(
        image_url=image_url,
        original_prompt=prompt,
        optimized_prompt=final_prompt,
        style=style,
        mood=mood,
        seed=seed,
        created_at=int(time.time() * 1000),
    )
