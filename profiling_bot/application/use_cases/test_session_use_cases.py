"""Test session lifecycle: start, answer, complete, score."""

import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import UUID

from ...domain.entities import TestResult, TestSession
from ...domain.exceptions import (
    ActiveSessionExistsError,
    InvalidAnswerError,
    InvalidInputError,
    SessionAlreadyCompletedError,
    SessionNotFoundError,
)
from ...domain.repositories import IQuizConfigurationProvider, ISessionRepository
from ...domain.services import ScoringService, generate_orders
from ..dto import CurrentQuestionDTO
from ..locks import KeyedLock

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TestSessionStateMachine:
    """Owns the lifecycle of quiz attempts.

    Holds no session state between calls: every operation loads the session
    from the repository, mutates that copy and persists it with a single
    repository call. Operations on one session id, and session creation for
    one user, run under in-process locks.
    """

    __test__ = False

    def __init__(
        self,
        session_repository: ISessionRepository,
        quiz_provider: IQuizConfigurationProvider,
        scoring_service: Optional[ScoringService] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utc_now,
        active_session_ttl: Optional[timedelta] = None
    ):
        self.session_repository = session_repository
        self.quiz_provider = quiz_provider
        self.scoring_service = scoring_service or ScoringService()
        self.rng = rng
        self.clock = clock
        self.active_session_ttl = active_session_ttl
        self._session_locks = KeyedLock()
        self._user_locks = KeyedLock()

    async def start_test(self, user_id: int, user_name: str) -> TestSession:
        """Start a test, or return the user's active session if there is one."""

        logger.info(f"Starting test for user {user_id} ({user_name})")

        async with self._user_locks.acquire(user_id):
            await self._purge_stale_sessions()

            existing = await self.session_repository.get_active_by_user_id(user_id)
            if existing:
                logger.warning(f"User {user_id} already has active session {existing.id}")
                return existing

            return await self._create_session(user_id, user_name)

    async def restart_test(
        self,
        user_id: int,
        user_name: str,
        session_id: Optional[UUID] = None
    ) -> TestSession:
        """Abandon the user's active session, if any, and start a new one.

        With ``session_id`` the restart only goes ahead while that session is
        still the user's active one (or there is none); otherwise raises
        SessionNotFoundError and nothing is removed.
        """

        async with self._user_locks.acquire(user_id):
            existing = await self._drop_if_expired(
                await self.session_repository.get_active_by_user_id(user_id)
            )
            if existing and session_id is not None and existing.id != session_id:
                logger.warning(
                    f"Restart of session {session_id} rejected, user {user_id} is on session {existing.id}"
                )
                raise SessionNotFoundError(session_id)

            if existing:
                async with self._session_locks.acquire(existing.id):
                    await self.session_repository.remove_active(existing.id)
                logger.info(f"Abandoned session {existing.id} of user {user_id}")

            return await self._create_session(user_id, user_name)

    async def get_active_session(self, user_id: int) -> Optional[TestSession]:
        """Get the user's active session; expired sessions count as absent."""
        return await self._drop_if_expired(
            await self.session_repository.get_active_by_user_id(user_id)
        )

    async def get_completed_session(
        self,
        session_id: UUID,
        user_id: Optional[int] = None
    ) -> Optional[TestSession]:
        """Get a completed session, optionally only if it belongs to ``user_id``."""

        session = await self.session_repository.get_completed_by_id(session_id)
        if session is None:
            return None

        if user_id is not None and session.user_id != user_id:
            logger.warning(f"Session {session_id} doesn't belong to user {user_id}")
            return None

        return session

    async def get_current_question(self, session_id: UUID) -> Optional[CurrentQuestionDTO]:
        """Get the current question with its answers in this session's order."""

        session = await self._drop_if_expired(
            await self.session_repository.get_active_by_id(session_id)
        )
        if session is None or session.is_completed:
            return None

        question_id = session.current_question_id
        if question_id is None:
            return None

        question = await self.quiz_provider.get_question(question_id)
        if question is None:
            logger.error(f"Question {question_id} of session {session_id} not found in configuration")
            return None

        answers = tuple(
            answer
            for answer in (question.get_answer(aid) for aid in session.answer_order[question_id])
            if answer is not None
        )

        return CurrentQuestionDTO(
            session_id=session.id,
            position=session.current_question_position,
            total_questions=session.total_questions,
            question=question,
            answers=answers
        )

    async def answer_question(self, session_id: UUID, question_id: int, answer_id: int) -> TestSession:
        """Record an answer for the current question.

        Returns the session, completed if this was the last question.
        Raises SessionNotFoundError, SessionAlreadyCompletedError,
        QuestionMismatchError or InvalidAnswerError; storage is untouched
        when anything is raised.
        """

        async with self._session_locks.acquire(session_id):
            session = await self._load_active(session_id)

            try:
                session.record_answer(question_id, answer_id)

                question = await self.quiz_provider.get_question(question_id)
                if question is None or question.get_answer(answer_id) is None:
                    raise InvalidAnswerError(question_id, answer_id)
            except InvalidInputError as e:
                logger.warning(f"Rejected answer for session {session_id}: {e.message}")
                raise

            logger.debug(
                f"User {session.user_id} answered question {question_id} with answer {answer_id}"
            )
            logger.debug(f"Progress: {session.answered_count}/{session.total_questions} questions answered")

            if session.is_pending_completion:
                logger.info(f"All questions answered for session {session_id}")
                return await self._complete(session)

            await self.session_repository.save_active(session)
            return session

    async def complete_test(self, session_id: UUID) -> TestSession:
        """Complete a session whose questions have all been answered.

        Not idempotent: a second call raises SessionAlreadyCompletedError.
        """

        async with self._session_locks.acquire(session_id):
            session = await self._load_active(session_id)
            return await self._complete(session)

    async def calculate_result(self, completed_session: TestSession) -> TestResult:
        """Score a completed session."""

        questions = await self.quiz_provider.get_questions()
        categories = await self.quiz_provider.get_categories()

        return self.scoring_service.calculate_result(completed_session, questions, categories)

    async def _create_session(self, user_id: int, user_name: str) -> TestSession:
        questions = await self.quiz_provider.get_questions()
        orders = generate_orders(questions, self.rng)

        session = TestSession.create_new(
            user_id=user_id,
            user_name=user_name,
            orders=orders,
            started_at=self.clock()
        )

        try:
            await self.session_repository.save_active(session)
        except ActiveSessionExistsError:
            existing = await self.session_repository.get_active_by_user_id(user_id)
            if existing is None:
                raise
            logger.warning(f"User {user_id} got active session {existing.id} concurrently")
            return existing

        logger.info(f"Session {session.id} created for user {user_id}")
        logger.debug(f"Question order: {list(session.question_order)}")
        return session

    async def _load_active(self, session_id: UUID) -> TestSession:
        session = await self.session_repository.get_active_by_id(session_id)
        if session is not None:
            if await self._drop_if_expired(session) is None:
                raise SessionNotFoundError(session_id)
            return session

        if await self.session_repository.get_completed_by_id(session_id) is not None:
            logger.warning(f"Session {session_id} already completed")
            raise SessionAlreadyCompletedError(session_id)

        logger.warning(f"Session {session_id} not found")
        raise SessionNotFoundError(session_id)

    async def _complete(self, session: TestSession) -> TestSession:
        questions = await self.quiz_provider.get_questions()
        categories = await self.quiz_provider.get_categories()

        session.mark_completed(self.clock())
        self.scoring_service.calculate_result(session, questions, categories)

        await self.session_repository.archive(session)

        logger.info(
            f"Test completed for user {session.user_id}, session {session.id}, "
            f"type: {session.result_category_name}"
        )
        return session

    async def _purge_stale_sessions(self) -> None:
        if not self.active_session_ttl:
            return

        removed = await self.session_repository.purge_stale_active(self.clock() - self.active_session_ttl)
        if removed:
            logger.info(f"Cleaned up {removed} stale active sessions")

    def _is_expired(self, session: TestSession) -> bool:
        if not self.active_session_ttl:
            return False
        return session.started_at < self.clock() - self.active_session_ttl

    async def _drop_if_expired(self, session: Optional[TestSession]) -> Optional[TestSession]:
        """Remove an expired active session and report it as absent."""

        if session is None or not self._is_expired(session):
            return session

        await self.session_repository.remove_active(session.id)
        logger.info(f"Session {session.id} of user {session.user_id} expired")
        return None
