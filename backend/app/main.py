from dotenv import load_dotenv

load_dotenv()  # Loads .env automatically

from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import (
    Depends,
    FastAPI,
    UploadFile,
    File,
    Form,
    HTTPException,
)
from fastapi.middleware.cors import CORSMiddleware

from .agents.compare_agent import ThumbnailComparer
from .agents.competitor_agent import analyze_competitor
from .agents.keyword_agent import find_keywords
from .agents.script_agent import generate_script
from .agents.thumbnail_agent import generate_thumbnail
from .agents.title_agent import generate_titles, suggest_best_time

from .config import Settings
from .errors import (
    AssistantError,
    CompositeFailure,
    InvalidInput,
    MalformedResponse,
    MissingCredential,
    TransportError,
)
from .image_compressor import bytes_to_data_uri
from .logging_config import log, get_metrics_snapshot
from .memory.memory import get_or_create_session, append_event, get_session_history
from .models import (
    BestTimeRequest,
    CompetitorRequest,
    ScriptRequest,
    ThumbnailGenRequest,
    TopicRequest,
)
from .jobs.jobs import create_job, get_job, cancel_job
from .provider_client import ProviderClient


app = FastAPI(title="TubeMaster AI", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==========================================================
#                    SHARED DEPENDENCIES
# ==========================================================


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def get_client(settings: Settings = Depends(get_settings)) -> ProviderClient:
    return ProviderClient(settings)


def get_comparer(
    client: ProviderClient = Depends(get_client),
    settings: Settings = Depends(get_settings),
) -> ThumbnailComparer:
    return ThumbnailComparer(client, settings)


_STATUS_BY_ERROR = {
    InvalidInput: 400,
    MissingCredential: 401,
    TransportError: 502,
    MalformedResponse: 502,
    CompositeFailure: 502,
}


def _http_error(e: AssistantError) -> HTTPException:
    status = next(
        (code for cls, code in _STATUS_BY_ERROR.items() if isinstance(e, cls)),
        500,
    )
    return HTTPException(status_code=status, detail={"error": e.code, "message": str(e)})


# ==========================================================
#                    FEATURE ENDPOINTS
# ==========================================================


@app.post("/api/v1/keywords")
async def keywords(body: TopicRequest, client: ProviderClient = Depends(get_client)):
    try:
        results = await find_keywords(client, body.topic)
    except AssistantError as e:
        log.error(f"❌ Keyword research failed: {e}")
        raise _http_error(e)
    return {"keywords": [k.model_dump() for k in results]}


@app.post("/api/v1/script")
async def script(body: ScriptRequest, client: ProviderClient = Depends(get_client)):
    try:
        result = await generate_script(client, body.title, body.audience)
    except AssistantError as e:
        log.error(f"❌ Script generation failed: {e}")
        raise _http_error(e)
    return result.model_dump()


@app.post("/api/v1/titles")
async def titles(body: TopicRequest, client: ProviderClient = Depends(get_client)):
    try:
        results = await generate_titles(client, body.topic)
    except AssistantError as e:
        log.error(f"❌ Title generation failed: {e}")
        raise _http_error(e)
    return {"titles": results}


@app.post("/api/v1/best-time")
async def best_time(body: BestTimeRequest, client: ProviderClient = Depends(get_client)):
    try:
        suggestion = await suggest_best_time(client, body.title, body.audience, body.tags)
    except AssistantError as e:
        log.error(f"❌ Best-time suggestion failed: {e}")
        raise _http_error(e)
    return {"suggestion": suggestion}


@app.post("/api/v1/competitor")
async def competitor(body: CompetitorRequest, client: ProviderClient = Depends(get_client)):
    try:
        result = await analyze_competitor(client, body.channel_url)
    except AssistantError as e:
        log.error(f"❌ Competitor analysis failed: {e}")
        raise _http_error(e)
    return result.model_dump()


# ==========================================================
#                    THUMBNAIL GENERATION
# ==========================================================


@app.post("/api/v1/thumbnail/generate")
async def thumbnail_generate(body: ThumbnailGenRequest, client: ProviderClient = Depends(get_client)):
    try:
        result = await generate_thumbnail(client, body.prompt, body.style, body.mood, body.optimize)
    except AssistantError as e:
        log.error(f"❌ Thumbnail generation failed: {e}")
        raise _http_error(e)

    session_id = get_or_create_session(body.session_id)
    item = result.model_dump()
    append_event(session_id, item)
    return {"session_id": session_id, "result": item}


@app.get("/api/v1/thumbnail/history/{session_id}")
async def thumbnail_history(session_id: str) -> Dict[str, Any]:
    return {"session_id": session_id, "history": get_session_history(session_id)}


# ==========================================================
#                    THUMBNAIL A/B COMPARISON
# ==========================================================


async def _read_pair(file_a: UploadFile, file_b: UploadFile) -> List[str]:
    images = []
    for upload in (file_a, file_b):
        data = await upload.read()
        if not data:
            raise InvalidInput("Please upload both thumbnails for analysis.")
        images.append(bytes_to_data_uri(data, upload.content_type))
    return images


@app.post("/api/v1/thumbnail/compare")
async def thumbnail_compare(
    file_a: UploadFile = File(...),
    file_b: UploadFile = File(...),
    provider: str = Form("OPENROUTER"),
    api_key: Optional[str] = Form(None),
    comparer: ThumbnailComparer = Depends(get_comparer),
):
    """
    Which of two thumbnails gets the click? Winner is reported in the
    caller's A/B frame.
    """
    try:
        image_a, image_b = await _read_pair(file_a, file_b)
        result = await comparer.compare(image_a, image_b, provider, api_key)
    except AssistantError as e:
        log.error(f"❌ Thumbnail comparison failed: {e}")
        raise _http_error(e)
    return result.model_dump(mode="json")


@app.post("/api/v1/thumbnail/compare_async")
async def thumbnail_compare_async(
    file_a: UploadFile = File(...),
    file_b: UploadFile = File(...),
    provider: str = Form("OPENROUTER"),
    api_key: Optional[str] = Form(None),
    comparer: ThumbnailComparer = Depends(get_comparer),
):
    """
    Same as /compare but returns a job id at once; the job can be polled
    or cancelled.
    """
    try:
        image_a, image_b = await _read_pair(file_a, file_b)
    except AssistantError as e:
        raise _http_error(e)

    job_id = create_job(
        comparer.compare(image_a, image_b, provider, api_key),
        serialize=lambda result: result.model_dump(mode="json"),
    )
    return {"job_id": job_id, "status": "queued"}


@app.get("/api/v1/jobs/{job_id}")
async def get_job_status(job_id: str):
    job = get_job(job_id)
    if job.get("status") == "not_found":
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@app.delete("/api/v1/jobs/{job_id}")
async def cancel_job_endpoint(job_id: str):
    if get_job(job_id).get("status") == "not_found":
        raise HTTPException(status_code=404, detail="Job not found")
    cancelled = cancel_job(job_id)
    return {"job_id": job_id, "cancelled": cancelled, **get_job(job_id)}


# ==========================================================
#                     METRICS + HEALTH
# ==========================================================


@app.get("/metrics")
async def metrics():
    return get_metrics_snapshot()


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "tools": [
            "keywords",
            "script",
            "titles",
            "best-time",
            "competitor",
            "thumbnail-generate",
            "thumbnail-compare",
        ],
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.app.main:app", host="127.0.0.1", port=8000, reload=True)
