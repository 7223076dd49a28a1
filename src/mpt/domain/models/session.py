"""
Session Domain Model

Represents one guided MPT conversation. A Session owns its
SessionState and its provider failover record; all three share
the same lifetime.

PRIVACY: Message content may contain sensitive information.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from mpt.domain.enums import MessageRole
from mpt.domain.models.session_state import SessionState, create_initial_session_state


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionMessage:
    """
    A single transcript turn.

    Frozen: messages are never mutated after being appended.
    """

    role: MessageRole
    content: str
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        """Serialize message to dictionary."""
        return {
            "id": self.id,
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ProviderFallbackState:
    """
    Per-session record that the session is served by the secondary provider.

    Exists only between a primary rate-limit failure and the next
    successful primary call (or the secondary disappearing).

    Attributes:
        use_fallback: Session routes to the secondary backend
        fallback_time: Wall-clock time (epoch seconds) of the last switch
    """

    fallback_time: float
    use_fallback: bool = True

    def retry_due(self, now: float, interval_seconds: float) -> bool:
        """Whether the primary should be tried again."""
        return now - self.fallback_time >= interval_seconds


@dataclass
class Session:
    """
    Guided conversation entity.

    Attributes:
        id: Opaque unique identifier, immutable
        scenario_id: Detected or client-chosen theme, set at most once
        scenario_name: Display name of the scenario
        script_id: Guidance template chosen for the conversation
        script_name: Display name of the script
        messages: Append-only transcript
        phase: Display label mirroring the current stage
        created_at: Creation time, immutable
        updated_at: Last activity time
        state: Stage machine working memory
        fallback: Provider failover record, None in normal mode
    """

    id: str = field(default_factory=lambda: str(uuid4()))
    scenario_id: Optional[str] = None
    scenario_name: Optional[str] = None
    script_id: Optional[str] = None
    script_name: Optional[str] = None
    messages: list[SessionMessage] = field(default_factory=list)
    phase: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    state: SessionState = field(default_factory=create_initial_session_state)
    fallback: Optional[ProviderFallbackState] = None

    def add_message(self, role: MessageRole, content: str) -> SessionMessage:
        """Append a transcript message and touch the session."""
        message = SessionMessage(role=role, content=content)
        self.messages.append(message)
        self.updated_at = _utcnow()
        return message

    def set_scenario(self, scenario_id: str, scenario_name: str) -> bool:
        """
        Record the scenario unless one is already set.

        Returns:
            True if the scenario was recorded
        """
        if self.scenario_id:
            return False
        self.scenario_id = scenario_id
        self.scenario_name = scenario_name
        return True

    def get_conversation_context(self, limit: int = 0) -> list[dict]:
        """
        Get messages formatted for the model call.

        Args:
            limit: Most recent messages to include (0 includes all)
        """
        messages = self.messages[-limit:] if limit else self.messages
        return [{"role": m.role.value, "content": m.content} for m in messages]

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def to_dict(self, include_messages: bool = True) -> dict:
        """Serialize session to dictionary."""
        data = {
            "sessionId": self.id,
            "scenarioId": self.scenario_id,
            "scenarioName": self.scenario_name,
            "scriptId": self.script_id,
            "scriptName": self.script_name,
            "phase": self.phase,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "messageCount": self.message_count,
            "state": self.state.to_dict(),
        }
        if include_messages:
            data["messages"] = [m.to_dict() for m in self.messages]
        return data
