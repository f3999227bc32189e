"""SQLAlchemy database models."""

from sqlalchemy import BigInteger, Column, DateTime, Index, Integer, JSON, String, Uuid

from .connection import Base


class SessionColumnsMixin:
    """Columns shared by active and completed sessions."""

    id = Column(Uuid(as_uuid=True), primary_key=True)
    user_name = Column(String(255), nullable=False, default="")

    # Lifecycle
    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    current_question_position = Column(Integer, nullable=False, default=1)

    # Original question id -> original answer id
    answers = Column(JSON, nullable=False, default=dict)

    # Per-session display order
    question_order = Column(JSON, nullable=False, default=list)
    answer_order = Column(JSON, nullable=False, default=dict)

    # Result
    result_category_id = Column(Integer, nullable=True)
    result_category_name = Column(String(255), nullable=True)


class ActiveSessionModel(SessionColumnsMixin, Base):
    """Active (in-progress) test session."""

    __tablename__ = "active_sessions"

    # One active session per user
    user_id = Column(BigInteger, unique=True, nullable=False)

    __table_args__ = (
        Index('idx_active_sessions_started_at', 'started_at'),
    )


class CompletedSessionModel(SessionColumnsMixin, Base):
    """Completed test session."""

    __tablename__ = "completed_sessions"

    user_id = Column(BigInteger, index=True, nullable=False)

    __table_args__ = (
        Index('idx_completed_sessions_completed_at', 'completed_at'),
        Index('idx_completed_sessions_result', 'result_category_id'),
    )
