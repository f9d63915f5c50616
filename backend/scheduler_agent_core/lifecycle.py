from __future__ import annotations

from .models import PHASES


class LifecycleError(Exception):
    pass


class PhaseTracker:
    _TRANSITIONS = {
        "idle": {"awaiting_user"},
        "awaiting_user": {"scheduling", "idle"},
        "scheduling": {"completed"},
        "completed": {"idle", "awaiting_user"},
    }

    def __init__(self) -> None:
        self.current = "idle"
        self.history: list[str] = ["idle"]

    def transition(self, next_phase: str) -> bool:
        """Move to ``next_phase``; returns False when already there."""
        if next_phase not in PHASES:
            raise LifecycleError(f"Unknown phase: {next_phase}")
        if next_phase == self.current:
            return False
        allowed_next = self._TRANSITIONS.get(self.current, set())
        if next_phase not in allowed_next:
            raise LifecycleError(f"Invalid transition: {self.current} -> {next_phase}")
        self.current = next_phase
        self.history.append(next_phase)
        return True

    def restart(self) -> None:
        self.history = [self.current]
