from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from scheduler_agent_core.models import ScheduleRequest, ScheduleSuccessResponse

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://medikah-chat-api.onrender.com"


class ScheduleClientError(Exception):
    pass


def _provider_error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return body["detail"]
    return response.reason_phrase or "Schedule request failed"


class ScheduleClient:
    """Posts completed interviews to the scheduling backend's ``/schedule`` route."""

    def __init__(
        self,
        api_base: str | None = DEFAULT_API_BASE,
        *,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_base = (api_base or "").strip()
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.api_base.rstrip('/')}/schedule"

    async def post_schedule(self, request: ScheduleRequest) -> ScheduleSuccessResponse:
        if not self.api_base:
            raise ScheduleClientError("API base URL is not configured")

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds, connect=8.0),
                transport=self._transport,
            ) as client:
                response = await client.post(self.endpoint, json=request.as_payload())
        except httpx.TimeoutException as exc:
            raise ScheduleClientError("Schedule provider timed out.") from exc
        except httpx.HTTPError as exc:
            raise ScheduleClientError("Failed to reach schedule provider.") from exc

        if not response.is_success:
            detail = _provider_error_message(response)
            logger.warning("schedule request rejected (%s): %s", response.status_code, detail)
            raise ScheduleClientError(detail)

        try:
            body = response.json()
        except ValueError as exc:
            raise ScheduleClientError("Schedule provider returned invalid JSON.") from exc

        try:
            return ScheduleSuccessResponse.model_validate(body)
        except ValidationError as exc:
            raise ScheduleClientError("Schedule provider returned an unexpected payload.") from exc
