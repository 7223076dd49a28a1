"""
Session Orchestrator

Handles one chat turn end to end:
classify → accumulate context → stage transition → compose prompt →
gateway stream → filter → SSE frames → persist.

ARCHITECTURE: Everything before the model call is synchronous and
runs under the session's lock together with the stream, so two
requests for the same session id are handled strictly one after
the other.

PRIVACY: Message content is never logged, only lengths and ids.
"""

import asyncio
import json
from contextlib import aclosing
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from mpt.config.logging_config import bind_session_id, get_logger
from mpt.domain.enums import MessageRole, ProviderRole
from mpt.domain.models import Session
from mpt.infrastructure.llm import (
    CompletionRequest,
    LLMProviderError,
    ProviderGateway,
    ProviderSwitch,
    ProviderUnavailableError,
    TextDelta,
)
from mpt.infrastructure.metrics import track_chat_turn, track_stage_transition
from mpt.infrastructure.storage import SessionStore
from mpt.services.catalog import (
    Scenario,
    ScriptCatalog,
    get_phase_from_stage,
    get_scenario,
    get_stage_info,
)
from mpt.services.detection import detect_request_type, detect_scenario
from mpt.services.prompt import PromptComposer
from mpt.services.stages import ContextAccumulator, advance, should_advance
from mpt.services.streaming import StreamFilter

logger = get_logger(__name__)


def _sse_event(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


def _sse_json(event: str, payload: dict) -> str:
    """Named frame whose JSON payload repeats the event name as ``type``."""
    return _sse_event(event, json.dumps({"type": event, **payload}, ensure_ascii=False))


@dataclass
class PreparedTurn:
    """
    Result of the synchronous part of a turn.

    Attributes:
        session: Session being served
        request: Model call ready for the gateway
        transitioned: Stage changed during this turn
    """

    session: Session
    request: CompletionRequest
    transitioned: bool = False


class SessionOrchestrator:
    """
    Request-handling facade over the MPT engine.

    Usage:
        session = await orchestrator.resolve_session(session_id, scenario_id, message)
        async for frame in orchestrator.stream_turn(session, message):
            ...
    """

    # Stored when the model produced no visible text
    FALLBACK_RESPONSE: str = "An error occurred. Please try again."

    # Appended to partial output of a failed stream
    PARTIAL_RESPONSE_NOTICE: str = "\n\n[The response was interrupted. Please try again.]"

    PROVIDER_SWITCH_MESSAGE: str = "Switching to the backup AI provider..."
    OVERLOADED_MESSAGE: str = "The AI service is temporarily overloaded. Please try again later."
    INTERNAL_ERROR_MESSAGE: str = "An unexpected error occurred. Please try again."

    def __init__(
        self,
        store: SessionStore,
        gateway: ProviderGateway,
        catalog: Optional[ScriptCatalog] = None,
        composer: Optional[PromptComposer] = None,
        accumulator: Optional[ContextAccumulator] = None,
        history_limit: int = 0,
    ) -> None:
        """
        Initialize orchestrator with its collaborators.

        Args:
            store: Session storage
            gateway: Failover-aware model gateway
            catalog: Template data for scripts and prompts
            composer: System instruction builder
            accumulator: Turn-to-state folding
            history_limit: Most recent messages sent to the model (0 sends all)
        """
        self.store = store
        self.gateway = gateway
        self.catalog = catalog or ScriptCatalog()
        self.composer = composer or PromptComposer(self.catalog)
        self.accumulator = accumulator or ContextAccumulator()
        self.history_limit = history_limit

    # =========================================================================
    # SESSIONS
    # =========================================================================

    async def create_session(
        self,
        scenario_id: Optional[str] = None,
        first_message: str = "",
    ) -> Session:
        """
        Create and store a new session.

        An explicit known scenario wins; otherwise the scenario is
        detected from the first message, if any. Unknown scenario ids
        are ignored.

        Args:
            scenario_id: Client-chosen scenario
            first_message: Message that opened the session, if any

        Returns:
            New session positioned at the first stage
        """
        session = Session()

        scenario: Optional[Scenario] = get_scenario(scenario_id) if scenario_id else None
        if scenario is None and first_message:
            scenario = detect_scenario(first_message)
        if scenario is not None:
            session.set_scenario(scenario.id, scenario.name)

        script = self.catalog.select_best_script(first_message, session.scenario_id)
        session.script_id = script.id
        session.script_name = script.name

        if first_message:
            session.state.request_type = detect_request_type(first_message)
            session.state.context.original_request = first_message.strip()

        session.phase = get_phase_from_stage(session.state.current_stage)
        await self.store.put(session)

        logger.info(
            "Session created",
            session_id=session.id,
            scenario_id=session.scenario_id,
            script_id=session.script_id,
        )
        return session

    async def get_session(self, session_id: str) -> Optional[Session]:
        """Look up a stored session."""
        return await self.store.get(session_id)

    async def resolve_session(
        self,
        session_id: Optional[str],
        scenario_id: Optional[str],
        message: str,
    ) -> Session:
        """
        Existing session for the id, or a new one opened by this message.

        Unknown ids start a new session with a fresh id.
        """
        if session_id:
            session = await self.store.get(session_id)
            if session is not None:
                return session
            logger.info("Unknown session id, starting new session", requested_id=session_id)
        return await self.create_session(scenario_id=scenario_id, first_message=message)

    # =========================================================================
    # TURN
    # =========================================================================

    def prepare_turn(self, session: Session, message: str) -> PreparedTurn:
        """
        Run the synchronous part of a turn.

        Appends the client message, updates scenario/script, folds the
        turn into state, advances the stage when complete, and composes
        the model call. Mutates ``session``; the caller holds its lock.

        Args:
            session: Session being served
            message: Client message

        Returns:
            Prepared model call
        """
        session.add_message(MessageRole.USER, message)

        if not session.scenario_id:
            scenario = detect_scenario(message)
            if scenario is not None:
                session.set_scenario(scenario.id, scenario.name)

        if not session.script_id:
            script = self.catalog.select_best_script(message, session.scenario_id)
            session.script_id = script.id
            session.script_name = script.name

        classification = self.accumulator.accumulate(
            session.state,
            message,
            session.get_conversation_context(),
        )

        transitioned = False
        if should_advance(session.state):
            previous = session.state.current_stage
            session.state = advance(session.state)
            transitioned = session.state.current_stage != previous
            if transitioned:
                track_stage_transition(previous.value, session.state.current_stage.value)
                logger.info(
                    "Stage advanced",
                    session_id=session.id,
                    from_stage=previous.value,
                    to_stage=session.state.current_stage.value,
                )

        system_prompt = self.composer.compose(
            session.state,
            scenario=get_scenario(session.scenario_id),
            script=self.catalog.get_script_by_id(session.script_id),
            authorship_note=classification.authorship_note,
        )
        request = CompletionRequest(
            system_prompt=system_prompt,
            messages=session.get_conversation_context(self.history_limit),
        )
        return PreparedTurn(session=session, request=request, transitioned=transitioned)

    async def stream_turn(self, session: Session, message: str) -> AsyncIterator[str]:
        """
        Handle one chat turn and yield SSE frames.

        Frames: ``meta`` once, ``chunk`` per visible increment, ``info``
        and ``provider_switch`` on failover, then exactly one of
        ``done`` or ``error``.

        On client disconnect the backend stream is closed and no
        assistant message is stored.

        Args:
            session: Session resolved for this request
            message: Client message

        Yields:
            Encoded SSE frames
        """
        async with self.store.lock(session.id):
            bind_session_id(session.id)

            try:
                prepared = self.prepare_turn(session, message)
            except Exception:
                logger.exception("Turn preparation failed", session_id=session.id)
                track_chat_turn("failed")
                yield _sse_json("error", {"message": self.INTERNAL_ERROR_MESSAGE})
                return

            role = self.gateway.route(session)
            yield _sse_json("meta", self._meta_payload(session, role))

            stream_filter = StreamFilter()
            try:
                async with aclosing(self.gateway.stream(session, prepared.request)) as events:
                    async for event in events:
                        if isinstance(event, TextDelta):
                            visible = stream_filter.feed(event.content)
                            if visible:
                                yield _sse_json("chunk", {"content": visible})
                        elif isinstance(event, ProviderSwitch):
                            yield _sse_json("info", {"message": self.PROVIDER_SWITCH_MESSAGE})
                            yield _sse_json("provider_switch", {
                                "provider": event.role.value,
                                "providerName": event.provider,
                            })
                tail = stream_filter.flush()
                if tail:
                    yield _sse_json("chunk", {"content": tail})

            except (asyncio.CancelledError, GeneratorExit):
                track_chat_turn("cancelled")
                logger.info(
                    "Client disconnected mid-stream",
                    session_id=session.id,
                    partial_length=len(stream_filter.visible),
                )
                raise

            except ProviderUnavailableError as e:
                logger.error("No provider available", session_id=session.id, error=str(e))
                await self._commit_failure(session, stream_filter.visible)
                yield _sse_json("error", {"message": self.OVERLOADED_MESSAGE})
                return

            except LLMProviderError as e:
                logger.error(
                    "Provider stream failed",
                    session_id=session.id,
                    provider=e.provider,
                    error=str(e),
                )
                await self._commit_failure(session, stream_filter.visible)
                yield _sse_json("error", {"message": str(e)})
                return

            except Exception:
                logger.exception("Chat turn failed", session_id=session.id)
                await self._commit_failure(session, stream_filter.visible)
                yield _sse_json("error", {"message": self.INTERNAL_ERROR_MESSAGE})
                return

            await self._commit_success(session, stream_filter)
            yield _sse_json("done", self._done_payload(session))

    # =========================================================================
    # COMMIT
    # =========================================================================

    async def _commit_success(self, session: Session, stream_filter: StreamFilter) -> None:
        content = stream_filter.visible
        if not content.strip():
            logger.warning(
                "Model produced no visible content",
                session_id=session.id,
                raw_length=len(stream_filter.raw),
            )
            content = self.FALLBACK_RESPONSE

        session.add_message(MessageRole.ASSISTANT, content)
        session.phase = get_phase_from_stage(session.state.current_stage)
        await self.store.put(session)
        track_chat_turn("completed")

        logger.info(
            "Chat turn completed",
            session_id=session.id,
            stage=session.state.current_stage.value,
            response_length=len(content),
        )

    async def _commit_failure(self, session: Session, partial: str) -> None:
        """Persist partial output with a notice; total failure stores nothing."""
        if partial.strip():
            session.add_message(MessageRole.ASSISTANT, partial + self.PARTIAL_RESPONSE_NOTICE)
        session.phase = get_phase_from_stage(session.state.current_stage)
        await self.store.put(session)
        track_chat_turn("failed")

    # =========================================================================
    # PAYLOADS
    # =========================================================================

    def _meta_payload(self, session: Session, role: ProviderRole) -> dict:
        stage = session.state.current_stage
        return {
            "sessionId": session.id,
            "scenarioId": session.scenario_id,
            "scenarioName": session.scenario_name,
            "scriptId": session.script_id,
            "scriptName": session.script_name,
            "currentStage": stage.value,
            "stageName": get_stage_info(stage).display_name,
            "provider": role.value,
            "providerName": self.gateway.provider_for(role).provider_name,
        }

    @staticmethod
    def _done_payload(session: Session) -> dict:
        stage = session.state.current_stage
        return {
            "phase": session.phase,
            "currentStage": stage.value,
            "stageName": get_stage_info(stage).display_name,
        }

    @staticmethod
    def session_summary(session: Session) -> dict:
        """Payload returned when a session is created."""
        stage = session.state.current_stage
        return {
            "sessionId": session.id,
            "scenarioId": session.scenario_id,
            "scenarioName": session.scenario_name,
            "scriptId": session.script_id,
            "scriptName": session.script_name,
            "phase": session.phase,
            "currentStage": stage.value,
            "stageName": get_stage_info(stage).display_name,
        }
