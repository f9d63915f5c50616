from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from .models import SchedulerCopy


TimeResolver = Callable[[str], str | None]


@dataclass(frozen=True)
class SlotDecision:
    accepted: bool
    value: str | None = None
    error: str | None = None


class SlotPolicy:
    _EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

    def __init__(self, copy: SchedulerCopy, resolve_time: TimeResolver) -> None:
        self.copy = copy
        self.resolve_time = resolve_time

    def is_valid_email(self, value: str) -> bool:
        return bool(self._EMAIL_PATTERN.match(value))

    def is_skip_word(self, value: str) -> bool:
        lowered = value.strip().lower()
        return any(lowered == word for word in self.copy.skip_words)

    def evaluate(self, question: str, text: str) -> SlotDecision:
        cleaned = (text or "").strip()
        if question == "name":
            if not cleaned:
                return SlotDecision(False, error=self.copy.invalid_name)
            return SlotDecision(True, cleaned)
        if question == "email":
            if not self.is_valid_email(cleaned):
                return SlotDecision(False, error=self.copy.invalid_email)
            return SlotDecision(True, cleaned)
        if question == "symptoms":
            if not cleaned:
                return SlotDecision(False, error=self.copy.invalid_symptoms)
            return SlotDecision(True, cleaned)
        if question == "time":
            resolved = self.resolve_time(cleaned)
            if not resolved:
                return SlotDecision(False, error=self.copy.invalid_time)
            return SlotDecision(True, resolved)
        if question == "locale":
            return SlotDecision(True, None if self.is_skip_word(cleaned) else cleaned)
        raise ValueError(f"Unknown question: {question}")
