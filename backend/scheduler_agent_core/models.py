from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel


PHASES = {"idle", "awaiting_user", "scheduling", "completed"}
ACTIVE_PHASES = {"awaiting_user", "scheduling"}

QUESTION_KEYS = ("name", "email", "symptoms", "time", "locale")
QUESTION_FIELDS = {
    "name": "patient_name",
    "email": "patient_email",
    "symptoms": "symptoms",
    "time": "preferred_time_iso",
    "locale": "locale_preference",
}

SUPPORTED_LANGS = ("en", "es")


@dataclass
class CollectedData:
    patient_name: str | None = None
    patient_email: str | None = None
    symptoms: str | None = None
    preferred_time_iso: str | None = None
    locale_preference: str | None = None


@dataclass
class DialogueState:
    question: str | None = None
    locale_asked: bool = False
    submitting: bool = False
    data: CollectedData = field(default_factory=CollectedData)


@dataclass(frozen=True)
class SchedulerAction:
    label: str
    url: str


@dataclass(frozen=True)
class SchedulerMessage:
    text: str
    actions: list[SchedulerAction] | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "actions": [{"label": action.label, "url": action.url} for action in self.actions or []],
        }


@dataclass(frozen=True)
class SchedulerCopy:
    intro_greeting: str
    acknowledge_prefill: str
    ask_name: str
    ask_email: str
    ask_symptoms: str
    ask_time: str
    ask_time_help: str
    ask_locale: str
    optional_skip_hint: str
    confirm_scheduling: str
    success_headline: str
    success_details: str
    failure_headline: str
    failure_details: str
    invalid_name: str
    invalid_email: str
    invalid_time: str
    invalid_symptoms: str
    view_visit: str
    add_calendar: str
    agent_signature: str
    skip_words: tuple[str, ...] = ()


@dataclass
class ScheduleRequest:
    patient_name: str
    patient_email: str
    appointment_time_iso: str
    symptoms: str | None = None
    locale_preference: str | None = None

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "patient_name": self.patient_name,
            "patient_contact": self.patient_email,
            "appointment_time": self.appointment_time_iso,
        }
        if self.symptoms is not None:
            payload["symptoms"] = self.symptoms
        if self.locale_preference is not None:
            payload["locale_preference"] = self.locale_preference
        return payload


class ScheduleSuccessResponse(BaseModel):
    appointment_id: str
    doxy_link: str
    calendar_link: str
    message: str
