# backend/app/agents/competitor_agent.py

import html
import logging
import re

import httpx

from ..errors import InvalidInput
from ..models import CompetitorAnalysisResult
from ..normalizer import get_str, get_str_list, parse_json
from ..provider_client import ProviderClient

log = logging.getLogger("tubemaster")

MAX_CONTEXT_CHARS = 2000

_TITLE_RE = re.compile(r"<title>(.*?)</title>", re.S | re.I)
_DESC_RE = re.compile(r'name="description" content="(.*?)"', re.S | re.I)

COMPETITOR_PROMPT = """Analyze this YouTube channel: {context}
Identify 3 strengths, 3 weaknesses, 3 content gaps, the top performing topics, and an action plan.
Return strictly JSON with keys: channelName, subscriberEstimate, strengths, weaknesses,
contentGaps, topPerformingTopics, actionPlan."""


def page_context(page_html: str) -> str:
    title = _TITLE_RE.search(page_html)
    desc = _DESC_RE.search(page_html)
    return (
        f"Channel: {html.unescape(title.group(1).strip()) if title else ''}\n"
        f"Desc: {html.unescape(desc.group(1).strip()) if desc else ''}"
    )


async def scrape_channel(client: ProviderClient, channel_url: str) -> str:
    """
    Fetch title + description through the CORS proxy. Any failure falls
    back to the bare URL so the analysis still runs.
    """
    try:
        async with client.http_client(timeout=20.0) as http:
            response = await http.get(client.settings.scrape_proxy_url, params={"url": channel_url})
        response.raise_for_status()
        contents = response.json().get("contents")
        if not contents:
            raise ValueError("Could not fetch channel page")
        return page_context(contents)
    except (httpx.HTTPError, ValueError, AttributeError) as e:
        log.warning(f"⚠️ Channel scrape failed for {channel_url}: {e}")
        return f"Channel URL: {channel_url} (Scrape failed)"


async def analyze_competitor(client: ProviderClient, channel_url: str) -> CompetitorAnalysisResult:
    if not (channel_url or "").strip():
        raise InvalidInput("Enter a channel URL.")
    channel_url = channel_url.strip()

    log.info(f"🕵️ Analyzing competitor {channel_url}")
    context = await scrape_channel(client, channel_url)
    raw = parse_json(await client.ask_brain(COMPETITOR_PROMPT.format(context=context[:MAX_CONTEXT_CHARS])))

    return CompetitorAnalysisResult(
        channel_name=get_str(raw, "channelName", "channel_name"),
        subscriber_estimate=get_str(raw, "subscriberEstimate", "subscriber_estimate"),
        strengths=get_str_list(raw, "strengths"),
        weaknesses=get_str_list(raw, "weaknesses"),
        content_gaps=get_str_list(raw, "contentGaps", "content_gaps"),
        top_performing_topics=get_str_list(raw, "topPerformingTopics", "top_performing_topics"),
        action_plan=get_str(raw, "actionPlan", "action_plan"),
    )
