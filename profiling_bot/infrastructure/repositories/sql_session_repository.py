"""SQL session repository implementation."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, Union
from uuid import UUID

from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError

from ...domain.entities import TestSession
from ...domain.exceptions import ActiveSessionExistsError, SessionNotCompletedError
from ...domain.repositories import ISessionRepository
from ..database import ActiveSessionModel, CompletedSessionModel, DatabaseManager

logger = logging.getLogger(__name__)

SessionModel = Union[ActiveSessionModel, CompletedSessionModel]


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SQLSessionRepository(ISessionRepository):
    """SQL implementation of session repository."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def get_active_by_id(self, session_id: UUID) -> Optional[TestSession]:
        async with self.db_manager.get_session() as db:
            model = await db.get(ActiveSessionModel, session_id)
            return self._to_entity(model) if model else None

    async def get_active_by_user_id(self, user_id: int) -> Optional[TestSession]:
        stmt = select(ActiveSessionModel).where(ActiveSessionModel.user_id == user_id)

        async with self.db_manager.get_session() as db:
            result = await db.execute(stmt)
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None

    async def get_all_active(self) -> List[TestSession]:
        stmt = select(ActiveSessionModel).order_by(ActiveSessionModel.started_at)

        async with self.db_manager.get_session() as db:
            result = await db.execute(stmt)
            return [self._to_entity(model) for model in result.scalars().all()]

    async def save_active(self, session: TestSession) -> None:
        async with self.db_manager.get_session() as db:
            await self._upsert(db, ActiveSessionModel, session)
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                logger.warning(f"User {session.user_id} already has another active session")
                raise ActiveSessionExistsError(session.user_id)

        logger.debug(f"Saved active session {session.id} for user {session.user_id}")

    async def remove_active(self, session_id: UUID) -> bool:
        stmt = delete(ActiveSessionModel).where(ActiveSessionModel.id == session_id)

        async with self.db_manager.get_session() as db:
            result = await db.execute(stmt)
            await db.commit()

        removed = result.rowcount > 0
        if removed:
            logger.debug(f"Removed active session {session_id}")
        return removed

    async def save_completed(self, session: TestSession) -> None:
        if not session.is_completed:
            raise SessionNotCompletedError(session.id)

        async with self.db_manager.get_session() as db:
            await self._upsert(db, CompletedSessionModel, session)
            await db.commit()

        logger.debug(f"Saved completed session {session.id} for user {session.user_id}")

    async def archive(self, session: TestSession) -> None:
        if not session.is_completed:
            raise SessionNotCompletedError(session.id)

        async with self.db_manager.get_session() as db:
            await self._upsert(db, CompletedSessionModel, session)
            await db.execute(delete(ActiveSessionModel).where(ActiveSessionModel.id == session.id))
            await db.commit()

        logger.debug(f"Archived session {session.id} for user {session.user_id}")

    async def get_completed_by_id(self, session_id: UUID) -> Optional[TestSession]:
        async with self.db_manager.get_session() as db:
            model = await db.get(CompletedSessionModel, session_id)
            return self._to_entity(model) if model else None

    async def get_completed(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> List[TestSession]:
        stmt = select(CompletedSessionModel)
        if date_from is not None:
            stmt = stmt.where(CompletedSessionModel.completed_at >= date_from)
        if date_to is not None:
            stmt = stmt.where(CompletedSessionModel.completed_at <= date_to)
        stmt = stmt.order_by(CompletedSessionModel.completed_at.desc())

        async with self.db_manager.get_session() as db:
            result = await db.execute(stmt)
            return [self._to_entity(model) for model in result.scalars().all()]

    async def count_completed(self) -> int:
        stmt = select(func.count(CompletedSessionModel.id))

        async with self.db_manager.get_session() as db:
            result = await db.execute(stmt)
            return result.scalar() or 0

    async def purge_stale_active(self, older_than: datetime) -> int:
        stmt = delete(ActiveSessionModel).where(ActiveSessionModel.started_at < older_than)

        async with self.db_manager.get_session() as db:
            result = await db.execute(stmt)
            await db.commit()

        return result.rowcount or 0

    async def _upsert(self, db, model_class: Type[SessionModel], session: TestSession) -> None:
        values = self._to_values(session)
        model = await db.get(model_class, session.id)

        if model is None:
            db.add(model_class(**values))
        else:
            for key, value in values.items():
                setattr(model, key, value)

    def _to_values(self, session: TestSession) -> Dict[str, Any]:
        """Convert domain entity to column values."""

        return {
            "id": session.id,
            "user_id": session.user_id,
            "user_name": session.user_name,
            "started_at": session.started_at,
            "completed_at": session.completed_at,
            "current_question_position": session.current_question_position,
            "answers": {str(qid): aid for qid, aid in session.answers.items()},
            "question_order": list(session.question_order),
            "answer_order": {str(qid): list(order) for qid, order in session.answer_order.items()},
            "result_category_id": session.result_category_id,
            "result_category_name": session.result_category_name,
        }

    def _to_entity(self, model: SessionModel) -> TestSession:
        """Convert database model to domain entity."""

        return TestSession(
            id=model.id,
            user_id=model.user_id,
            user_name=model.user_name,
            started_at=_as_utc(model.started_at),
            completed_at=_as_utc(model.completed_at),
            current_question_position=model.current_question_position,
            answers={int(qid): int(aid) for qid, aid in (model.answers or {}).items()},
            question_order=tuple(int(qid) for qid in model.question_order or ()),
            answer_order={
                int(qid): tuple(int(aid) for aid in order)
                for qid, order in (model.answer_order or {}).items()
            },
            result_category_id=model.result_category_id,
            result_category_name=model.result_category_name,
        )
