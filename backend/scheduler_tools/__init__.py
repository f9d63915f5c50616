from __future__ import annotations

from scheduler_agent_core.registry import SubmitterDefinition, SubmitterRegistry

from .i18n import get_scheduler_copy, normalize_lang
from .schedule_client import DEFAULT_API_BASE, ScheduleClient, ScheduleClientError
from .simulated import SimulatedScheduleBackend


def register_submitters(
    registry: SubmitterRegistry,
    client: ScheduleClient,
    simulated: SimulatedScheduleBackend,
) -> None:
    registry.register(SubmitterDefinition("remote", client.post_schedule, aliases=("live",)))
    registry.register(SubmitterDefinition("simulated", simulated.post_schedule, aliases=("demo",)))


__all__ = [
    "DEFAULT_API_BASE",
    "ScheduleClient",
    "ScheduleClientError",
    "SimulatedScheduleBackend",
    "get_scheduler_copy",
    "normalize_lang",
    "register_submitters",
]
