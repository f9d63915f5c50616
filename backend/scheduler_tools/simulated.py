from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

from scheduler_agent_core.models import ScheduleRequest, ScheduleSuccessResponse
from scheduler_agent_core.time_utils import parse_iso

from .schedule_client import ScheduleClientError

VISIT_MINUTES = 30


def _calendar_stamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


class SimulatedScheduleBackend:
    """In-process stand-in for the scheduling backend, used in demo mode."""

    def __init__(self, visit_base_url: str = "https://doxy.me/medikah") -> None:
        self.visit_base_url = visit_base_url.rstrip("/")
        self.requests: list[ScheduleRequest] = []

    def calendar_link(self, request: ScheduleRequest, starts_at: datetime) -> str:
        ends_at = starts_at + timedelta(minutes=VISIT_MINUTES)
        details = request.symptoms or ""
        query = urlencode(
            {
                "action": "TEMPLATE",
                "text": "Medikah telehealth visit",
                "dates": f"{_calendar_stamp(starts_at)}/{_calendar_stamp(ends_at)}",
                "details": details,
            }
        )
        return f"https://calendar.google.com/calendar/render?{query}"

    async def post_schedule(self, request: ScheduleRequest) -> ScheduleSuccessResponse:
        if not request.patient_name.strip() or not request.patient_email.strip():
            raise ScheduleClientError("Missing patient identity.")
        starts_at = parse_iso(request.appointment_time_iso)
        if starts_at is None:
            raise ScheduleClientError("Invalid appointment_time.")

        self.requests.append(request)
        appointment_id = f"apt_{uuid.uuid4().hex[:12]}"
        return ScheduleSuccessResponse(
            appointment_id=appointment_id,
            doxy_link=f"{self.visit_base_url}?appointment={appointment_id}",
            calendar_link=self.calendar_link(request, starts_at),
            message="Appointment scheduled (simulated).",
        )
