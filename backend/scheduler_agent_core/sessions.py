from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from .controller import ChatSchedulerAgent, MessageSink
from .models import SchedulerMessage


AgentFactory = Callable[[MessageSink], ChatSchedulerAgent]


@dataclass
class SchedulerSession:
    user_id: str
    session_key: str
    agent: ChatSchedulerAgent | None = None
    outbox: list[SchedulerMessage] = field(default_factory=list)

    def collect(self, message: SchedulerMessage) -> None:
        self.outbox.append(message)

    def drain(self) -> list[SchedulerMessage]:
        messages = list(self.outbox)
        self.outbox.clear()
        return messages


class SchedulerSessionStore:
    """One scheduler agent per (user, chat session)."""

    def __init__(self) -> None:
        self._sessions: dict[tuple[str, str], SchedulerSession] = {}

    def get(self, user_id: str, session_key: str) -> SchedulerSession | None:
        return self._sessions.get((user_id, session_key))

    def open(self, user_id: str, session_key: str, factory: AgentFactory) -> SchedulerSession:
        session = self.get(user_id, session_key)
        if session is not None:
            return session
        session = SchedulerSession(user_id=user_id, session_key=session_key)
        session.agent = factory(session.collect)
        self._sessions[(user_id, session_key)] = session
        return session

    def close(self, user_id: str, session_key: str) -> bool:
        session = self._sessions.pop((user_id, session_key), None)
        if session is None:
            return False
        if session.agent is not None:
            session.agent.dispose()
        return True

    def close_all(self) -> None:
        for session in list(self._sessions.values()):
            self.close(session.user_id, session.session_key)

    def __len__(self) -> int:
        return len(self._sessions)
