# backend/app/agents/compare_agent.py

import asyncio
import logging
import random
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..config import Settings
from ..errors import CompositeFailure, InvalidInput, MalformedResponse, MissingCredential, ProviderError
from ..image_compressor import compress_image
from ..logging_config import inc_metric
from ..models import BreakdownItem, ComparisonResult, Winner
from ..normalizer import get_float, get_list, get_str, parse_json
from ..provider_client import Message, Provider, ProviderClient, VisionProvider, get_provider

log = logging.getLogger("tubemaster")

Compressor = Callable[..., Awaitable[str]]

COMPARE_SYSTEM = """
Act as a specialized YouTube Thumbnail Optimization AI.

You are comparing two thumbnails (**Image 1** and **Image 2**) for a high-stakes A/B test.
Image 1 is the FIRST image attached below, Image 2 is the SECOND.

**CONTEXT**:
- 70% of YouTube views are on Mobile. Small screens.
- High CTR requires immediate comprehension.
- "B-Roll" or "Artistic" wide shots usually FAIL.
- "Emotive Close-ups" usually WIN.

**YOUR TASK**:
Evaluate the images based on these 10 PROVEN VIRAL FACTORS:

1. **Mobile Clarity (The Squint Test)**: If you squint, can you still see the main subject? (Weight: 20%)
2. **Facial Dominance**: Is the face large and emotive? (Close-up > Full Body). (Weight: 15%)
3. **Text Readability**: Large, bold, contrasting text? (<5 words). (Weight: 10%)
4. **Curiosity Gap**: Does the image provoke a "Must Click" question? (Weight: 10%)
5. **Color Vibrancy**: High saturation/contrast vs dull/washed out. (Weight: 10%)
6. **Subject Isolation**: Distinct separation from background. (Weight: 10%)
7. **Rule of Thirds**: Professional, balanced composition. (Weight: 5%)
8. **Emotional Impact**: Extreme emotion (Shock/Fear/Joy) > Neutral. (Weight: 10%)
9. **Visual Hierarchy**: Clear focal point. (Weight: 5%)
10. **Lighting Quality**: Professional vs Amateur/Dark. (Weight: 5%)

**CRITICAL BIAS CORRECTION**:
- You may have a bias towards the second image. IGNORE IT.
- You may have a bias towards "pretty" art. IGNORE IT.
- **PRIORITIZE CLOSE-UPS.** If Image 1 is a face close-up and Image 2 is a wide landscape, Image 1 wins 9 times out of 10.

**OUTPUT FORMAT (JSON ONLY)**:
{
  "shot_type_1": "Identify shot type of Image 1 (Close-up/Mid/Wide)",
  "shot_type_2": "Identify shot type of Image 2 (Close-up/Mid/Wide)",
  "winner": "1" or "2",
  "score1": (0-10 float),
  "score2": (0-10 float),
  "reasoning": "Direct explanation of why the winner gets more clicks on mobile.",
  "breakdown": [
    { "criterion": "Mobile Clarity", "winner": "1" or "2", "explanation": "..." },
    ... (for all 10 factors)
  ]
}
"""

_FIRST_LABELS = {"1", "image 1", "image1", "first", "first image"}
_SECOND_LABELS = {"2", "image 2", "image2", "second", "second image"}


def _position(label: Any) -> Optional[int]:
    """Model label -> presentation position (1 or 2), None when unreadable."""
    if label is None or isinstance(label, bool):
        return None
    text = re.sub(r"[\s*_\"'.]+", " ", str(label)).strip().lower()
    if text in _FIRST_LABELS:
        return 1
    if text in _SECOND_LABELS:
        return 2
    if "image 1" in text:
        return 1
    if "image 2" in text:
        return 2
    return None


def to_caller_label(label: Any, swapped: bool) -> Optional[Winner]:
    """
    Map the model's "first/second" verdict back to the caller's A/B frame.

    Identity remap only: when the images were swapped, the model's first
    image is the caller's B.
    """
    position = _position(label)
    if position is None:
        return None
    if position == 1:
        return Winner.B if swapped else Winner.A
    return Winner.A if swapped else Winner.B


def _clamp10(x: float) -> float:
    return max(0.0, min(10.0, x))


def build_messages(first_image: str, second_image: str) -> List[Message]:
    return [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": COMPARE_SYSTEM},
                {"type": "image_url", "image_url": {"url": first_image}},
                {"type": "image_url", "image_url": {"url": second_image}},
            ],
        }
    ]


def build_result(raw: Dict[str, Any], swapped: bool, model: str = "") -> ComparisonResult:
    score1 = _clamp10(get_float(raw, "score1", "score_1"))
    score2 = _clamp10(get_float(raw, "score2", "score_2"))
    score_a, score_b = (score2, score1) if swapped else (score1, score2)

    winner = to_caller_label(raw.get("winner"), swapped)
    if winner is None:
        if score_a == score_b:
            raise MalformedResponse(f"Model returned an unreadable winner label: {raw.get('winner')!r}")
        log.warning(f"⚠️ Unreadable winner label {raw.get('winner')!r}; using scores")
        winner = Winner.A if score_a > score_b else Winner.B

    breakdown: List[BreakdownItem] = []
    for item in get_list(raw, "breakdown"):
        if not isinstance(item, dict):
            continue
        item_winner = to_caller_label(item.get("winner"), swapped)
        if item_winner is None:
            log.warning(f"⚠️ Dropping breakdown row with unreadable winner: {item!r}")
            continue
        breakdown.append(
            BreakdownItem(
                criterion=get_str(item, "criterion"),
                winner=item_winner,
                explanation=get_str(item, "explanation"),
            )
        )

    return ComparisonResult(
        winner=winner,
        score_a=score_a,
        score_b=score_b,
        reasoning=get_str(raw, "reasoning"),
        breakdown=breakdown,
        swapped=swapped,
        model=model,
    )


class ThumbnailComparer:
    """
    A/B thumbnail comparison through a vision model.

    Pipeline: compress both images -> random presentation order -> one
    rubric prompt -> parse + map back to A/B -> one fallback-model retry
    for providers that offer one.
    """

    def __init__(
        self,
        client: ProviderClient,
        settings: Settings,
        rng: Optional[random.Random] = None,
        compressor: Compressor = compress_image,
    ):
        self.client = client
        self.settings = settings
        self.rng = rng or random.Random()
        self.compressor = compressor

    async def _ask(
        self,
        provider: VisionProvider,
        messages: List[Message],
        api_key: str,
        swapped: bool,
        model: str,
    ) -> ComparisonResult:
        text = await self.client.chat(provider, messages, api_key, model=model, json_mode=True, max_tokens=2048)
        return build_result(parse_json(text), swapped, model=model)

    async def compare(
        self,
        image_a: str,
        image_b: str,
        provider: Union[Provider, str] = Provider.OPENROUTER,
        api_key: Optional[str] = None,
        swap: Optional[bool] = None,
    ) -> ComparisonResult:
        if not (image_a or "").strip() or not (image_b or "").strip():
            raise InvalidInput("Please upload both thumbnails for analysis.")

        vision = get_provider(provider)
        key = self.settings.resolve_key(vision.name, api_key)
        if not key:
            raise MissingCredential(vision.name)

        log.info(f"🆚 Comparing thumbnails with {vision.name}")
        compressed_a, compressed_b = await asyncio.gather(
            self.compressor(image_a, timeout=self.settings.compress_timeout),
            self.compressor(image_b, timeout=self.settings.compress_timeout),
        )

        swapped = self.rng.random() < 0.5 if swap is None else bool(swap)
        first, second = (compressed_b, compressed_a) if swapped else (compressed_a, compressed_b)
        messages = build_messages(first, second)

        primary_model = vision.default_model()
        try:
            result = await self._ask(vision, messages, key, swapped, primary_model)
        except ProviderError as primary_error:
            fallback_model = vision.fallback_model()
            if not fallback_model:
                log.error(f"❌ {vision.name} comparison failed: {primary_error}")
                raise
            log.warning(f"⚠️ Primary model {primary_model} failed ({primary_error}). Attempting fallback {fallback_model}...")
            inc_metric("vision_fallbacks")
            try:
                result = await self._ask(vision, messages, key, swapped, fallback_model)
            except ProviderError as fallback_error:
                log.error(f"❌ Fallback model {fallback_model} failed: {fallback_error}")
                raise CompositeFailure(primary_error, fallback_error) from fallback_error

        log.info(f"✅ Comparison complete (winner={result.winner.value}, swapped={swapped})")
        return result


async def compare_thumbnails(
    client: ProviderClient,
    settings: Settings,
    image_a: str,
    image_b: str,
    provider: Union[Provider, str] = Provider.OPENROUTER,
    api_key: Optional[str] = None,
) -> ComparisonResult:
    return await ThumbnailComparer(client, settings).compare(image_a, image_b, provider, api_key)
