import asyncio
import logging
import uuid
from typing import Any, Callable, Coroutine, Dict, Optional

log = logging.getLogger("tubemaster")

# Finished jobs kept for polling; the oldest are dropped past this.
MAX_FINISHED_JOBS = 100

_FINISHED = ("done", "error", "cancelled")

_jobs: Dict[str, Dict[str, Any]] = {}
_tasks: Dict[str, "asyncio.Task[Any]"] = {}
# Coroutines whose runner has not started yet.
_pending: Dict[str, Coroutine[Any, Any, Any]] = {}


def _finish(job_id: str, record: Dict[str, Any]) -> None:
    if job_id not in _jobs:
        return
    _jobs[job_id] = record
    finished = [jid for jid, job in _jobs.items() if job.get("status") in _FINISHED]
    for jid in finished[: max(len(finished) - MAX_FINISHED_JOBS, 0)]:
        del _jobs[jid]


def create_job(coro: Coroutine[Any, Any, Any], serialize: Optional[Callable[[Any], Any]] = None) -> str:
    """
    Schedule `coro` on the running loop and track it under a new job id.
    Must be called from inside the event loop.
    """
    job_id = str(uuid.uuid4())
    _jobs[job_id] = {"status": "pending"}
    _pending[job_id] = coro

    async def runner():
        work = _pending.pop(job_id)
        try:
            result = await work
        except asyncio.CancelledError:
            _finish(job_id, {"status": "cancelled"})
            raise
        except Exception as e:
            log.error(f"❌ Job {job_id} failed: {e}")
            set_job_error(job_id, str(e), getattr(e, "code", "error"))
        else:
            set_job_result(job_id, serialize(result) if serialize else result)
        finally:
            _tasks.pop(job_id, None)

    _tasks[job_id] = asyncio.ensure_future(runner())
    return job_id


def set_job_result(job_id: str, result: Any):
    _finish(job_id, {"status": "done", "result": result})


def set_job_error(job_id: str, error: str, code: str = "error"):
    _finish(job_id, {"status": "error", "error": error, "code": code})


def cancel_job(job_id: str) -> bool:
    """Cancel an in-flight job. Returns False when nothing was running."""
    task = _tasks.get(job_id)
    if task is None or task.done():
        return False
    task.cancel()
    never_started = _pending.pop(job_id, None)
    if never_started is not None:
        # the runner body will not execute, so clean up here
        never_started.close()
        _tasks.pop(job_id, None)
    _finish(job_id, {"status": "cancelled"})
    log.info(f"🛑 Job {job_id} cancelled")
    return True


def get_job(job_id: str) -> Dict[str, Any]:
    return _jobs.get(job_id, {"status": "not_found"})


async def wait_job(job_id: str) -> Dict[str, Any]:
    task = _tasks.get(job_id)
    if task is not None:
        await asyncio.gather(task, return_exceptions=True)
    return get_job(job_id)
