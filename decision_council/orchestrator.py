"""Session orchestration: prompt, concurrent fan-out to members, aggregate, repeat."""

import asyncio
import contextlib
import json
import logging
from collections.abc import Callable

from decision_council.drivers.base import AgentDriver, AgentUnavailableError
from decision_council.errors import CouncilValidationError, SessionSequenceError, SessionStateError
from decision_council.methods.base import load_state
from decision_council.methods.registry import MethodRegistry
from decision_council.models import (
    Contribution,
    Council,
    CouncilMember,
    Issue,
    Session,
    SessionRound,
    SessionStatus,
    ToolType,
)
from decision_council.repository import InMemoryRepository
from decision_council.tools.base import ToolAdapter
from decision_council.tools.registry import get_adapter

logger = logging.getLogger(__name__)


class SessionOrchestrator:
    """Drives sessions through their decision method one round at a time.

    Rounds within a session are strictly sequential; within a round every member is
    asked concurrently. Nothing is written to the session until every reply is in, so a
    cancelled round leaves the session exactly as it was.
    """

    def __init__(
        self,
        registry: MethodRegistry,
        tool_adapters: dict[ToolType, ToolAdapter],
        agent_driver: AgentDriver,
        repository: InMemoryRepository[Session] | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self._registry = registry
        self._tools = tool_adapters
        self._driver = agent_driver
        self._repository = repository
        self._max_concurrency = max_concurrency

    def _save(self, session: Session) -> None:
        if self._repository is None:
            return
        if self._repository.find(session.id) is None:
            self._repository.add(session)
        else:
            self._repository.update(session)

    async def start_session(self, council: Council, issue: Issue) -> Session:
        """Create an Active session at round 0 with the method's initial state.

        Raises:
            UnknownMethodError: If the council's method is not registered.
            UnknownToolError: If the council's tool has no adapter.
            CouncilValidationError: If the council fails the method's preconditions.
        """
        method = self._registry.get(council.method)
        get_adapter(self._tools, council.tool)
        if not method.validate_council(council):
            raise CouncilValidationError(
                f"{method.display_name or method.method_type.value} needs at least "
                f"{method.min_members} member(s), council has {len(council.members)}"
            )

        session = Session(council_id=council.id, state_payload=method.initialize_state(council, issue))
        self._save(session)
        logger.info(
            "Started session %s: %s, %d rounds, %d members",
            session.id, method.method_type.value, method.max_rounds, len(council.members),
        )
        return session

    async def _ask(
        self,
        member: CouncilMember,
        prompt: str,
        round_number: int,
        semaphore: asyncio.Semaphore | None,
    ) -> tuple[CouncilMember, str] | None:
        """Ask one member. Never raises except on cancellation: failures return None."""
        async with semaphore if semaphore is not None else contextlib.nullcontext():
            try:
                if not await self._driver.is_available(member.agent_id):
                    logger.warning("Skipping %s in round %d: unavailable", member.name, round_number)
                    return None
                reply = await self._driver.get_response(member, prompt)
            except (AgentUnavailableError, TimeoutError) as exc:
                logger.warning("Skipping %s in round %d: %s", member.name, round_number, exc)
                return None
            except Exception as exc:
                logger.warning("Agent %s unexpected failure in round %d: %s", member.name, round_number, exc)
                return None

        if not reply or not reply.strip():
            logger.warning("Skipping %s in round %d: empty reply", member.name, round_number)
            return None
        return member, reply

    async def _collect(
        self,
        members: list[CouncilMember],
        prompt: str,
        round_number: int,
    ) -> list[tuple[CouncilMember, str]]:
        semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None
        results = await asyncio.gather(
            *(self._ask(m, prompt, round_number, semaphore) for m in members)
        )
        return [r for r in results if r is not None]

    async def _complete(self, session: Session, council: Council, reason: str) -> None:
        if session.status is not SessionStatus.COMPLETED:
            session.complete()
        logger.info("Session %s completed: %s", session.id, reason)
        results = await asyncio.gather(
            *(self._driver.notify(m.agent_id, reason) for m in council.members),
            return_exceptions=True,
        )
        for member, result in zip(council.members, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                logger.warning("Notify failed for %s: %s", member.name, result)

    async def execute_next_round(self, session: Session, council: Council) -> SessionRound:
        """Run the next round and fold it into the session.

        Raises:
            SessionStateError: If the session is not Active.
            SessionSequenceError: If the method has no rounds left. The session is
                marked Completed first.
        """
        if session.status is not SessionStatus.ACTIVE:
            raise SessionStateError(f"Session {session.id} is {session.status.value}, not Active")

        method = self._registry.get(council.method)
        adapter = get_adapter(self._tools, council.tool)

        next_prompt = method.next_prompt(session)
        if next_prompt.is_complete:
            reason = next_prompt.completion_reason or "Session complete."
            await self._complete(session, council, reason)
            self._save(session)
            raise SessionSequenceError(f"Session {session.id} has no rounds left: {reason}")

        round_number = session.current_round_number + 1
        instructions = f"{next_prompt.prompt_text}\n\n{adapter.generate_prompt_template()}"
        logger.info(
            "Starting round %d/%d with %d members", round_number, method.max_rounds, len(council.members),
        )

        replies = await self._collect(council.members, instructions, round_number)

        session_round = SessionRound(session_id=session.id, round_number=round_number, instructions=instructions)
        for member, raw in replies:
            parsed = adapter.parse_response(raw)
            if not parsed.is_valid:
                logger.debug("Reply from %s did not fit %s: %s", member.name, adapter.tool_type.value,
                             parsed.validation_error)
            session_round.add_contribution(
                Contribution(
                    session_round_id=session_round.id,
                    agent_id=member.agent_id,
                    raw_content=raw,
                    structured_data=parsed.structured_data_json,
                )
            )

        result = method.aggregate_round(session_round, session.state_payload)
        session_round.set_summary(result.summary_text if result.summary_text.strip() else f"Round {round_number} completed.")
        session.update_state_payload(result.updated_state_payload)
        session.add_round(session_round)

        logger.info(
            "Round %d complete: %d/%d members replied",
            round_number, len(replies), len(council.members),
        )

        if not result.should_continue:
            await self._complete(session, council, method.completion_reason)
        self._save(session)
        return session_round

    def should_continue(self, session: Session) -> bool:
        return session.status is SessionStatus.ACTIVE

    def finalize_session(self, session: Session) -> str:
        """Close the session and return its round-by-round summary."""
        if session.status in (SessionStatus.ACTIVE, SessionStatus.PAUSED):
            session.complete()
            self._save(session)

        blocks = [f"Round {r.round_number}: {r.summary}" for r in session.rounds if r.summary]
        if blocks:
            return "\n\n".join(blocks)

        state = load_state(session.state_payload)
        pretty = json.dumps(state, indent=2, ensure_ascii=False) if state else session.state_payload
        return f"Session completed.\n\nFinal state:\n{pretty}"

    async def run_session(
        self,
        council: Council,
        issue: Issue,
        on_round_complete: Callable[[SessionRound], None] | None = None,
    ) -> tuple[Session, str]:
        """Start a session and run it to completion.

        Returns:
            (session, final summary)
        """
        session = await self.start_session(council, issue)
        try:
            while self.should_continue(session):
                try:
                    session_round = await self.execute_next_round(session, council)
                except SessionSequenceError:
                    break
                if on_round_complete:
                    on_round_complete(session_round)
        except Exception:
            if session.status is not SessionStatus.COMPLETED:
                session.fail()
                self._save(session)
            raise
        return session, self.finalize_session(session)
