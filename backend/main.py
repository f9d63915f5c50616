from __future__ import annotations

import hashlib
import logging
import os
import re
from contextlib import asynccontextmanager
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Any, Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from scheduler_agent_core import (
    ChatSchedulerAgent,
    SchedulerSession,
    SchedulerSessionStore,
    SubmitterRegistry,
)
from scheduler_tools import (
    DEFAULT_API_BASE,
    ScheduleClient,
    SimulatedScheduleBackend,
    get_scheduler_copy,
    normalize_lang,
    register_submitters,
)


def _bootstrap_local_env() -> None:
    # Process env wins over both files, and the repo-root file over backend/.env.
    repo_root = Path(__file__).resolve().parents[1]
    for candidate in (repo_root / ".env", repo_root / "backend" / ".env"):
        if candidate.is_file():
            load_dotenv(dotenv_path=candidate, override=False)


_bootstrap_local_env()

logging.basicConfig(level=os.getenv("MEDIKAH_LOG_LEVEL", "INFO").upper())
logger = logging.getLogger("medikah.scheduler")


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


class SchedulerStartRequest(BaseModel):
    session_key: str | None = None
    lang: str = "en"
    patient_name: str | None = None
    patient_email: str | None = None
    timezone: str | None = None


class SchedulerInputRequest(BaseModel):
    session_key: str | None = None
    message: str


def _resolve_zone(name: str | None) -> tzinfo:
    candidate = (name or os.getenv("MEDIKAH_DEFAULT_TIMEZONE") or "UTC").strip()
    if candidate.upper() in {"UTC", "Z", "ETC/UTC"}:
        return timezone.utc
    try:
        return ZoneInfo(candidate)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Unknown timezone: {candidate}") from exc


class SchedulerApp:
    def __init__(self) -> None:
        self.schedule_mode = os.getenv("MEDIKAH_SCHEDULE_MODE", "remote")
        self.reset_delay_seconds = _env_float("MEDIKAH_SCHEDULER_RESET_DELAY_MS", 600.0) / 1000.0
        self.client = ScheduleClient(
            os.getenv("MEDIKAH_API_URL", DEFAULT_API_BASE),
            timeout_seconds=_env_float("MEDIKAH_SCHEDULE_TIMEOUT_SECONDS", 15.0),
        )
        self.simulated = SimulatedScheduleBackend()
        self.registry = SubmitterRegistry()
        register_submitters(self.registry, self.client, self.simulated)
        self.submitter = self.registry.resolve(self.schedule_mode)
        self.sessions = SchedulerSessionStore()
        logger.info("scheduler submitter: %s", self.submitter.name)

    def agent_factory(
        self,
        payload: SchedulerStartRequest,
    ) -> Callable[[Callable], ChatSchedulerAgent]:
        zone = _resolve_zone(payload.timezone)

        def _build(append_message: Callable) -> ChatSchedulerAgent:
            return ChatSchedulerAgent(
                lang=normalize_lang(payload.lang),
                submit=self.submitter.submit,
                append_message=append_message,
                copy_lookup=get_scheduler_copy,
                session_name=payload.patient_name,
                session_email=payload.patient_email,
                clock=lambda: datetime.now(zone),
                reset_delay_seconds=self.reset_delay_seconds,
            )

        return _build


container = SchedulerApp()


@asynccontextmanager
async def _lifespan(_: FastAPI):
    yield
    container.sessions.close_all()


app = FastAPI(title="Medikah Scheduler Backend", lifespan=_lifespan)

allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in allowed_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


_TRUSTED_USER_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._:@-]{1,63}$")
_SESSION_KEY_RE = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def _validated_trusted_user_id(x_user_id: str) -> str:
    candidate = x_user_id.strip()
    if not candidate or not _TRUSTED_USER_ID_RE.fullmatch(candidate):
        raise HTTPException(status_code=400, detail="Invalid X-User-Id")
    return candidate


def get_user_id(auth_header: str | None) -> str:
    raw = (auth_header or "").replace("Bearer", "", 1).strip()
    if not raw:
        if os.getenv("ALLOW_ANON", "false").lower() == "true":
            return "demo-user"
        raise HTTPException(status_code=401, detail="Missing Authorization")
    # Bearer tokens are opaque here; long ones are hashed into a stable id.
    if len(raw) > 96:
        return f"token_{hashlib.sha256(raw.encode('utf-8')).hexdigest()[:24]}"
    return raw


def resolve_user_id(authorization: str | None, x_user_id: str | None) -> str:
    if x_user_id is not None:
        return _validated_trusted_user_id(x_user_id)
    return get_user_id(authorization)


def _session_key_for(user_id: str, session_key: str | None) -> str:
    if not session_key:
        return f"session-{hashlib.sha1(user_id.encode('utf-8')).hexdigest()[:24]}"
    if not _SESSION_KEY_RE.fullmatch(session_key):
        raise HTTPException(status_code=400, detail="Invalid session_key")
    return session_key


def _require_session(user_id: str, session_key: str) -> SchedulerSession:
    session = container.sessions.get(user_id, session_key)
    if session is None or session.agent is None:
        raise HTTPException(status_code=404, detail="Scheduler session not found")
    return session


def _snapshot(session: SchedulerSession, accepted: bool | None = None) -> dict[str, Any]:
    agent = session.agent
    body: dict[str, Any] = {
        "session_key": session.session_key,
        "phase": agent.phase,
        "active": agent.is_active(),
        "awaiting_input": agent.is_awaiting_input(),
        "messages": [message.as_dict() for message in session.drain()],
    }
    if accepted is not None:
        body["accepted"] = accepted
    return body


@app.get("/health")
def health():
    return {"status": "ok", "submitter": container.submitter.name}


@app.post("/scheduler/start")
async def scheduler_start(
    payload: SchedulerStartRequest,
    authorization: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
):
    user_id = resolve_user_id(authorization, x_user_id)
    session_key = _session_key_for(user_id, payload.session_key)
    factory = container.agent_factory(payload)
    existing = container.sessions.get(user_id, session_key)
    if existing is not None and existing.agent is not None and not existing.agent.is_active():
        # Idle agents are rebuilt so a new language or identity applies.
        container.sessions.close(user_id, session_key)
    session = container.sessions.open(user_id, session_key, factory)
    await session.agent.start()
    return _snapshot(session)


@app.post("/scheduler/input")
async def scheduler_input(
    payload: SchedulerInputRequest,
    authorization: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
):
    user_id = resolve_user_id(authorization, x_user_id)
    session_key = _session_key_for(user_id, payload.session_key)
    session = _require_session(user_id, session_key)
    accepted = await session.agent.handle_user_input(payload.message)
    return _snapshot(session, accepted=accepted)


@app.get("/scheduler/{session_key}")
def scheduler_state(
    session_key: str,
    authorization: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
):
    user_id = resolve_user_id(authorization, x_user_id)
    session = _require_session(user_id, _session_key_for(user_id, session_key))
    return _snapshot(session)


@app.delete("/scheduler/{session_key}")
def scheduler_close(
    session_key: str,
    authorization: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
):
    user_id = resolve_user_id(authorization, x_user_id)
    closed = container.sessions.close(user_id, _session_key_for(user_id, session_key))
    if not closed:
        raise HTTPException(status_code=404, detail="Scheduler session not found")
    return {"status": "closed", "session_key": session_key}
