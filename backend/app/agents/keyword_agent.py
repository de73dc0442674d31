# backend/app/agents/keyword_agent.py

import logging
from typing import List

from ..errors import InvalidInput
from ..models import KeywordResult
from ..normalizer import get_float, get_list, get_str, parse_json
from ..provider_client import ProviderClient

log = logging.getLogger("tubemaster")

KEYWORD_PROMPT = """Act as a world-class YouTube SEO Expert.
Analyze the topic: "{topic}" and generate exactly 10 high-potential keywords.
For EACH keyword, apply these 10 Logic Points:
1. Search Volume: Estimate monthly searches.
2. Difficulty (KD): 0-100 score.
3. Opportunity Score: 0-100 score.
4. Trend: Rising, Stable, Falling, Seasonal.
5. Intent: Informational, Educational, Entertainment, Commercial.
6. CPC: Estimate value ($).
7. Competition Density: Low, Medium, High.
8. Top Competitor: Name a likely channel.
9. Video Age Avg: Fresh or Old.
10. CTR Potential: High/Avg/Low.

Return strictly a JSON Object with a key "keywords" containing an array of objects
with keys: keyword, searchVolume, difficulty, opportunityScore, trend, intent, cpc,
competitionDensity, topCompetitor, videoAgeAvg, ctrPotential."""


def _keyword_from_raw(item: dict) -> KeywordResult:
    return KeywordResult(
        keyword=get_str(item, "keyword"),
        search_volume=get_str(item, "searchVolume", "search_volume"),
        difficulty=get_float(item, "difficulty", "kd"),
        opportunity_score=get_float(item, "opportunityScore", "opportunity_score"),
        trend=get_str(item, "trend"),
        intent=get_str(item, "intent"),
        cpc=get_str(item, "cpc"),
        competition_density=get_str(item, "competitionDensity", "competition_density"),
        top_competitor=get_str(item, "topCompetitor", "top_competitor"),
        video_age_avg=get_str(item, "videoAgeAvg", "video_age_avg"),
        ctr_potential=get_str(item, "ctrPotential", "ctr_potential"),
    )


async def find_keywords(client: ProviderClient, topic: str) -> List[KeywordResult]:
    if not (topic or "").strip():
        raise InvalidInput("Enter a topic to research.")

    log.info(f"🔑 Keyword research for {topic!r}")
    raw = parse_json(await client.ask_brain(KEYWORD_PROMPT.format(topic=topic.strip())))

    keywords = [
        _keyword_from_raw(item)
        for item in get_list(raw, "keywords")
        if isinstance(item, dict) and get_str(item, "keyword")
    ]
    log.info(f"✅ Keyword research complete ({len(keywords)} keywords)")
    return keywords
