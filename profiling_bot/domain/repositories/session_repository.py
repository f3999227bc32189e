"""Test session repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from ..entities import TestSession


class ISessionRepository(ABC):
    """Storage for active and completed test sessions.

    Active and completed sessions are disjoint collections; a session lives
    in exactly one of them.
    """

    @abstractmethod
    async def get_active_by_id(self, session_id: UUID) -> Optional[TestSession]:
        """Get active session by ID."""
        pass

    @abstractmethod
    async def get_active_by_user_id(self, user_id: int) -> Optional[TestSession]:
        """Get the active session of a user."""
        pass

    @abstractmethod
    async def get_all_active(self) -> List[TestSession]:
        """Get all active sessions."""
        pass

    @abstractmethod
    async def save_active(self, session: TestSession) -> None:
        """Insert or replace an active session.

        Raises ActiveSessionExistsError if the user already has a
        different active session.
        """
        pass

    @abstractmethod
    async def remove_active(self, session_id: UUID) -> bool:
        """Remove active session."""
        pass

    @abstractmethod
    async def save_completed(self, session: TestSession) -> None:
        """Insert or replace a completed session."""
        pass

    @abstractmethod
    async def archive(self, session: TestSession) -> None:
        """Save session as completed and remove it from active, atomically."""
        pass

    @abstractmethod
    async def get_completed_by_id(self, session_id: UUID) -> Optional[TestSession]:
        """Get completed session by ID."""
        pass

    @abstractmethod
    async def get_completed(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> List[TestSession]:
        """Get completed sessions within an optional range, newest first."""
        pass

    @abstractmethod
    async def count_completed(self) -> int:
        """Get completed session count."""
        pass

    @abstractmethod
    async def purge_stale_active(self, older_than: datetime) -> int:
        """Remove active sessions started before ``older_than``."""
        pass
