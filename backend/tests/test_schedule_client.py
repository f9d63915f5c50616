from __future__ import annotations

import asyncio
import json
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from scheduler_agent_core import ScheduleRequest
from scheduler_tools import ScheduleClient, ScheduleClientError, SimulatedScheduleBackend


def _request(**overrides) -> ScheduleRequest:
    values = {
        "patient_name": "Ana López",
        "patient_email": "ana@example.com",
        "appointment_time_iso": "2025-10-20T09:00:00.000Z",
        "symptoms": "Persistent cough",
        "locale_preference": None,
    }
    values.update(overrides)
    return ScheduleRequest(**values)


def _client(handler, api_base: str = "https://api.test/") -> ScheduleClient:
    return ScheduleClient(api_base, timeout_seconds=2.0, transport=httpx.MockTransport(handler))


_SUCCESS_BODY = {
    "appointment_id": "apt_123",
    "doxy_link": "https://doxy.me/medikah?appointment=apt_123",
    "calendar_link": "https://calendar.google.com/calendar/render?action=TEMPLATE",
    "message": "Appointment scheduled.",
}


def test_post_schedule_sends_wire_payload_and_parses_response():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_SUCCESS_BODY)

    result = asyncio.run(_client(handler).post_schedule(_request()))

    assert result.appointment_id == "apt_123"
    assert result.doxy_link == _SUCCESS_BODY["doxy_link"]
    assert result.calendar_link == _SUCCESS_BODY["calendar_link"]
    assert len(seen) == 1
    assert seen[0].method == "POST"
    assert str(seen[0].url) == "https://api.test/schedule"
    assert json.loads(seen[0].content) == {
        "patient_name": "Ana López",
        "patient_contact": "ana@example.com",
        "appointment_time": "2025-10-20T09:00:00.000Z",
        "symptoms": "Persistent cough",
    }


def test_post_schedule_includes_locale_when_present():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=_SUCCESS_BODY)

    asyncio.run(_client(handler).post_schedule(_request(symptoms=None, locale_preference="es-MX")))
    assert bodies[0]["locale_preference"] == "es-MX"
    assert "symptoms" not in bodies[0]


def test_error_detail_is_taken_from_json_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, json={"detail": "calendar provider unavailable"})

    with pytest.raises(ScheduleClientError, match="calendar provider unavailable"):
        asyncio.run(_client(handler).post_schedule(_request()))


def test_error_without_json_detail_uses_reason_phrase():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="<html>oops</html>")

    with pytest.raises(ScheduleClientError, match="Internal Server Error"):
        asyncio.run(_client(handler).post_schedule(_request()))


def test_malformed_success_body_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"appointment_id": "apt_123"})

    with pytest.raises(ScheduleClientError, match="unexpected payload"):
        asyncio.run(_client(handler).post_schedule(_request()))


def test_non_json_success_body_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="scheduled!")

    with pytest.raises(ScheduleClientError, match="invalid JSON"):
        asyncio.run(_client(handler).post_schedule(_request()))


def test_transport_errors_are_wrapped():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def stall(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(ScheduleClientError, match="Failed to reach"):
        asyncio.run(_client(refuse).post_schedule(_request()))
    with pytest.raises(ScheduleClientError, match="timed out"):
        asyncio.run(_client(stall).post_schedule(_request()))


def test_missing_base_url_fails_before_any_request():
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=_SUCCESS_BODY)

    with pytest.raises(ScheduleClientError, match="not configured"):
        asyncio.run(_client(handler, api_base="  ").post_schedule(_request()))
    assert calls == []


def test_simulated_backend_builds_visit_and_calendar_links():
    backend = SimulatedScheduleBackend()
    result = asyncio.run(backend.post_schedule(_request()))

    assert result.appointment_id.startswith("apt_")
    assert result.doxy_link == f"https://doxy.me/medikah?appointment={result.appointment_id}"
    query = parse_qs(urlparse(result.calendar_link).query)
    assert query["action"] == ["TEMPLATE"]
    assert query["dates"] == ["20251020T090000Z/20251020T093000Z"]
    assert query["details"] == ["Persistent cough"]
    assert backend.requests == [_request()]


def test_simulated_backend_rejects_unreadable_time():
    with pytest.raises(ScheduleClientError):
        asyncio.run(SimulatedScheduleBackend().post_schedule(_request(appointment_time_iso="soon")))
