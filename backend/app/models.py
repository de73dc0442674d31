# backend/app/models.py

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class Winner(str, Enum):
    A = "A"
    B = "B"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------- Thumbnail comparison ----------

class BreakdownItem(_Record):
    criterion: str
    winner: Winner
    explanation: str = ""


class ComparisonResult(_Record):
    winner: Winner
    score_a: float
    score_b: float
    reasoning: str = ""
    breakdown: List[BreakdownItem] = []
    swapped: bool = False
    model: str = ""


# ---------- Feature endpoints ----------

class KeywordResult(_Record):
    keyword: str
    search_volume: str = ""
    difficulty: float = 0.0
    opportunity_score: float = 0.0
    trend: str = ""
    intent: str = ""
    cpc: str = ""
    competition_density: str = ""
    top_competitor: str = ""
    video_age_avg: str = ""
    ctr_potential: str = ""


class ScriptSection(_Record):
    title: str = ""
    content: str = ""
    duration: str = ""
    visual_cue: str = ""
    logic_step: str = ""
    psychological_trigger: str = ""


class ScriptResponse(_Record):
    title: str
    estimated_duration: str = ""
    target_audience: str = ""
    sections: List[ScriptSection] = []


class CompetitorAnalysisResult(_Record):
    channel_name: str = ""
    subscriber_estimate: str = ""
    strengths: List[str] = []
    weaknesses: List[str] = []
    content_gaps: List[str] = []
    top_performing_topics: List[str] = []
    action_plan: str = ""


class ThumbnailGenResult(_Record):
    image_url: str
    original_prompt: str
    optimized_prompt: str
    style: str
    mood: str = ""
    seed: int = 0
    created_at: int


# ---------- Request bodies ----------

class TopicRequest(BaseModel):
    topic: str = ""


class ScriptRequest(BaseModel):
    title: str = ""
    audience: str = "General Audience"


class BestTimeRequest(BaseModel):
    title: str = ""
    audience: str = "General Audience"
    tags: str = ""


class CompetitorRequest(BaseModel):
    channel_url: str = ""


class ThumbnailGenRequest(BaseModel):
    prompt: str = ""
    style: str = "realistic"
    mood: str = "Exciting"
    optimize: bool = True
    session_id: Optional[str] = None
