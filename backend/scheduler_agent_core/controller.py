"""Turn-by-turn appointment interview embedded in a chat surface.

The host forwards each utterance to :meth:`ChatSchedulerAgent.handle_user_input`
while :meth:`ChatSchedulerAgent.is_active` is true; everything else goes to the
general chat backend. Replies are pushed through ``append_message`` and phase
changes through ``on_state_change``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable

from .lifecycle import PhaseTracker
from .models import (
    ACTIVE_PHASES,
    QUESTION_FIELDS,
    DialogueState,
    SchedulerAction,
    SchedulerCopy,
    SchedulerMessage,
    ScheduleRequest,
)
from .policy import SlotPolicy
from .registry import ScheduleSubmitter
from .temporal import resolve_preferred_time

logger = logging.getLogger(__name__)

RESET_DELAY_SECONDS = 0.6

MessageSink = Callable[[SchedulerMessage], None]
PhaseListener = Callable[[str], None]
CopyLookup = Callable[[str], SchedulerCopy]
Clock = Callable[[], datetime]


class ChatSchedulerAgent:
    def __init__(
        self,
        *,
        lang: str,
        submit: ScheduleSubmitter,
        append_message: MessageSink,
        copy_lookup: CopyLookup,
        on_state_change: PhaseListener | None = None,
        session_name: str | None = None,
        session_email: str | None = None,
        clock: Clock | None = None,
        reset_delay_seconds: float = RESET_DELAY_SECONDS,
    ) -> None:
        self.lang = lang
        self.copy = copy_lookup(lang)
        self._submit = submit
        self._append_message = append_message
        self._on_state_change = on_state_change
        self._session_name = session_name
        self._session_email = session_email
        self._clock = clock
        self._reset_delay_seconds = reset_delay_seconds
        self.policy = SlotPolicy(self.copy, self._resolve_time)
        self.state = DialogueState()
        self._phases = PhaseTracker()
        self._reset_task: asyncio.Task | None = None
        self._disposed = False

    @property
    def phase(self) -> str:
        return self._phases.current

    @property
    def lifecycle(self) -> list[str]:
        return list(self._phases.history)

    @property
    def pending_reset(self) -> asyncio.Task | None:
        return self._reset_task

    def is_active(self) -> bool:
        return self.phase in ACTIVE_PHASES

    def is_awaiting_input(self) -> bool:
        return self.phase == "awaiting_user" and not self.state.submitting

    async def start(self) -> None:
        if self._disposed or self.phase in ACTIVE_PHASES:
            return
        self._cancel_pending_reset()
        self._reset()
        self._phases.restart()

        name = (self._session_name or "").strip()
        email = (self._session_email or "").strip()
        if name:
            self.state.data.patient_name = name
        if email:
            self.state.data.patient_email = email

        self._update_phase("awaiting_user")
        self._emit(f"{self.copy.intro_greeting}\n{self.copy.agent_signature}")
        if name or email:
            self._emit(self.copy.acknowledge_prefill)
        await self._queue_next_question()

    async def handle_user_input(self, raw_input: str) -> bool:
        """Consume one utterance; False means the host should route it elsewhere."""
        if self._disposed or self.phase == "idle":
            return False
        if self.phase == "scheduling":
            return True

        question = self.state.question
        if question is None:
            return False

        decision = self.policy.evaluate(question, raw_input)
        if not decision.accepted:
            self._emit(decision.error or "")
            return True

        setattr(self.state.data, QUESTION_FIELDS[question], decision.value)
        self.state.question = None
        await self._queue_next_question()
        return True

    def dispose(self) -> None:
        self._disposed = True
        self._cancel_pending_reset()

    def _resolve_time(self, text: str) -> str | None:
        now = self._clock() if self._clock else None
        return resolve_preferred_time(text, now=now)

    def _emit(self, text: str, actions: list[SchedulerAction] | None = None) -> None:
        self._append_message(SchedulerMessage(text=text, actions=actions))

    def _update_phase(self, next_phase: str) -> None:
        self._phases.transition(next_phase)
        if self._on_state_change:
            self._on_state_change(next_phase)

    def _reset(self) -> None:
        self.state = DialogueState()

    def _cancel_pending_reset(self) -> None:
        if self._reset_task and not self._reset_task.done():
            self._reset_task.cancel()
        self._reset_task = None

    def _ask(self, question: str, text: str) -> None:
        self.state.question = question
        self._update_phase("awaiting_user")
        self._emit(text)

    async def _queue_next_question(self) -> None:
        data = self.state.data
        copy = self.copy
        if not data.patient_name:
            self._ask("name", copy.ask_name)
            return
        if not data.patient_email:
            self._ask("email", copy.ask_email)
            return
        if not data.symptoms:
            self._ask("symptoms", copy.ask_symptoms)
            return
        if not data.preferred_time_iso:
            self._ask("time", f"{copy.ask_time}\n{copy.ask_time_help}")
            return
        if not self.state.locale_asked:
            self.state.locale_asked = True
            self._ask("locale", f"{copy.ask_locale}\n{copy.optional_skip_hint}")
            return
        await self._schedule_appointment()

    async def _schedule_appointment(self) -> None:
        data = self.state.data
        if not data.patient_name or not data.patient_email or not data.preferred_time_iso:
            self._reset()
            self._update_phase("idle")
            return

        copy = self.copy
        self.state.question = None
        self._update_phase("scheduling")
        self._emit(f"{copy.confirm_scheduling}\n{copy.agent_signature}")
        self.state.submitting = True

        request = ScheduleRequest(
            patient_name=data.patient_name,
            patient_email=data.patient_email,
            appointment_time_iso=data.preferred_time_iso,
            symptoms=data.symptoms,
            locale_preference=data.locale_preference,
        )
        try:
            response = await self._submit(request)
        except asyncio.CancelledError:
            logger.warning("appointment scheduling cancelled")
            if not self._disposed:
                self._emit(f"{copy.failure_headline}\n{copy.failure_details}\n{copy.agent_signature}")
                self._update_phase("completed")
            raise
        except Exception:
            logger.exception("appointment scheduling failed")
            if self._disposed:
                return
            self._emit(f"{copy.failure_headline}\n{copy.failure_details}\n{copy.agent_signature}")
            self._update_phase("completed")
        else:
            if self._disposed:
                return
            logger.info("appointment scheduled: %s", response.appointment_id)
            self._emit(
                f"{copy.success_headline}\n\n{copy.success_details}\n{copy.agent_signature}",
                actions=[
                    SchedulerAction(label=copy.view_visit, url=response.doxy_link),
                    SchedulerAction(label=copy.add_calendar, url=response.calendar_link),
                ],
            )
            self._update_phase("completed")
        finally:
            self.state.submitting = False
            if not self._disposed:
                self._reset_task = asyncio.get_running_loop().create_task(self._reset_after_delay())

    async def _reset_after_delay(self) -> None:
        await asyncio.sleep(self._reset_delay_seconds)
        if self._disposed:
            return
        self._reset()
        self._update_phase("idle")
        logger.debug("scheduler reset to idle")
