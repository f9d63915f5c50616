from .controller import ChatSchedulerAgent
from .lifecycle import LifecycleError, PhaseTracker
from .models import (
    ACTIVE_PHASES,
    PHASES,
    SUPPORTED_LANGS,
    CollectedData,
    DialogueState,
    SchedulerAction,
    SchedulerCopy,
    SchedulerMessage,
    ScheduleRequest,
    ScheduleSuccessResponse,
)
from .policy import SlotDecision, SlotPolicy
from .registry import SubmitterDefinition, SubmitterRegistry
from .sessions import SchedulerSession, SchedulerSessionStore
from .temporal import resolve_preferred_time

__all__ = [
    "ACTIVE_PHASES",
    "PHASES",
    "SUPPORTED_LANGS",
    "ChatSchedulerAgent",
    "CollectedData",
    "DialogueState",
    "LifecycleError",
    "PhaseTracker",
    "ScheduleRequest",
    "ScheduleSuccessResponse",
    "SchedulerAction",
    "SchedulerCopy",
    "SchedulerMessage",
    "SchedulerSession",
    "SchedulerSessionStore",
    "SlotDecision",
    "SlotPolicy",
    "SubmitterDefinition",
    "SubmitterRegistry",
    "resolve_preferred_time",
]
