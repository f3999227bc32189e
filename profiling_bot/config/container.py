"""Dependency injection container."""

import logging
from datetime import timedelta
from typing import Dict, Optional

from ..application.use_cases import TestSessionStateMachine
from ..domain.repositories import IQuizConfigurationProvider, ISessionRepository
from ..infrastructure.configuration import JsonQuizConfigurationProvider
from ..infrastructure.database import DatabaseManager
from ..infrastructure.repositories import InMemorySessionRepository, SQLSessionRepository
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


class Container:
    """Dependency injection container."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.db_manager: Optional[DatabaseManager] = None
        self.session_repository: Optional[ISessionRepository] = None
        self.quiz_provider: Optional[IQuizConfigurationProvider] = None
        self.state_machine: Optional[TestSessionStateMachine] = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Initialize container and all dependencies.

        Raises ConfigurationError if the quiz definition is inconsistent.
        """
        if self._initialized:
            return

        try:
            self.quiz_provider = JsonQuizConfigurationProvider(
                self.settings.quiz_config_dir,
                cache_ttl=self.settings.quiz_config_cache_ttl
            )
            await self.quiz_provider.validate()

            await self._register_storage()

            ttl_hours = self.settings.active_session_ttl_hours
            self.state_machine = TestSessionStateMachine(
                session_repository=self.session_repository,
                quiz_provider=self.quiz_provider,
                active_session_ttl=timedelta(hours=ttl_hours) if ttl_hours else None
            )

            self._initialized = True
            logger.info("Dependency injection container initialized")

        except Exception as e:
            logger.error(f"Failed to initialize container: {e}")
            raise

    async def _register_storage(self) -> None:
        if self.settings.storage_backend == "memory":
            self.session_repository = InMemorySessionRepository()
            logger.warning("Using in-memory session storage, sessions are lost on restart")
            return

        self.db_manager = DatabaseManager(self.settings.database_url, echo=self.settings.debug)
        await self.db_manager.initialize()
        await self.db_manager.create_tables()
        self.session_repository = SQLSessionRepository(self.db_manager)

    async def health_check(self) -> Dict[str, bool]:
        """Check health of all services."""
        health_status = {}

        if self.db_manager is not None:
            health_status["database"] = await self.db_manager.health_check()
        else:
            health_status["database"] = self.session_repository is not None

        try:
            await self.quiz_provider.validate()
            health_status["quiz_configuration"] = True
        except Exception as e:
            logger.error(f"Quiz configuration health check failed: {e}")
            health_status["quiz_configuration"] = False

        return health_status

    async def close(self) -> None:
        """Close container and cleanup resources."""
        if self.db_manager is not None:
            await self.db_manager.close()
        self._initialized = False
        logger.info("Container closed successfully")


_container: Optional[Container] = None


def get_container() -> Container:
    """Get the process-wide container instance."""
    global _container
    if _container is None:
        _container = Container(get_settings())
    return _container
