from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from .models import ScheduleRequest, ScheduleSuccessResponse


ScheduleSubmitter = Callable[[ScheduleRequest], Awaitable[ScheduleSuccessResponse]]


@dataclass(frozen=True)
class SubmitterDefinition:
    name: str
    submit: ScheduleSubmitter
    aliases: tuple[str, ...] = ()


class SubmitterRegistry:
    """Maps ``MEDIKAH_SCHEDULE_MODE`` values to the submitter that books visits."""

    def __init__(self) -> None:
        self._by_mode: dict[str, SubmitterDefinition] = {}

    def register(self, submitter: SubmitterDefinition) -> None:
        for mode in (submitter.name, *submitter.aliases):
            self._by_mode[mode] = submitter

    def resolve(self, mode: str | None) -> SubmitterDefinition:
        submitter = self._by_mode.get((mode or "").strip().lower())
        if submitter is None:
            known = ", ".join(sorted(self._by_mode))
            raise KeyError(f"Unknown schedule mode {mode!r}; expected one of: {known}")
        return submitter
