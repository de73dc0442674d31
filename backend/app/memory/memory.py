import uuid
from typing import Any, Dict, List, Optional
from collections import defaultdict

MAX_EVENTS = 20

# In-process only; history is gone when the service restarts.
_sessions: Dict[str, List[Dict[str, Any]]] = defaultdict(list)


def get_or_create_session(session_id: Optional[str]) -> str:
    if session_id and session_id in _sessions:
        return session_id
    new_id = str(uuid.uuid4())
    _sessions[new_id] = []
    return new_id


def append_event(session_id: str, event: Dict[str, Any]) -> None:
    _sessions[session_id].append(event)
    if len(_sessions[session_id]) > MAX_EVENTS:
        _sessions[session_id] = _sessions[session_id][-MAX_EVENTS:]


def get_session_history(session_id: str) -> List[Dict[str, Any]]:
    """Newest first, like the generator's history strip."""
    return list(reversed(_sessions.get(session_id, [])))


def clear_sessions() -> None:
    _sessions.clear()
