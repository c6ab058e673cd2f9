"""
Composition root: wires settings, logging, database, repositories and services.

The HTTP / session layer is expected to call build_services() once per unit of work (per request) and close the session afterwards.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings, configure_logging, get_settings
from src.core.locks import KeyedLock
from src.db.database import build_engine, build_session_factory
from src.db.sql_repository import (
    SQLMembershipRepository,
    SQLNimGameRepository,
    SQLUserRepository,
)
from src.services.membership_service import MembershipService
from src.services.nim_service import NimService

logger = logging.getLogger(__name__)


@dataclass
class Services:
    session: Session
    nim: NimService
    membership: MembershipService


class Application:
    """Long-lived parts: engine, session factory and the locks (shared by every unit of work)."""

    def __init__(
        self, settings: Optional[Settings] = None, engine: Optional[Engine] = None
    ) -> None:
        self.settings = settings or get_settings()
        configure_logging(self.settings)
        # An injected engine belongs to the caller: its tables are theirs to create and it is not disposed here
        self._owns_engine = engine is None
        self.engine = engine if engine is not None else build_engine(self.settings)
        self.session_factory: sessionmaker[Session] = build_session_factory(self.engine)
        self.game_locks = KeyedLock()
        self.membership_locks = KeyedLock()
        logger.info("Application ready, database: %s", self.engine.url)

    def build_services(self) -> Services:
        session = self.session_factory()
        return Services(
            session=session,
            nim=NimService(
                SQLNimGameRepository(session),
                settings=self.settings,
                locks=self.game_locks,
            ),
            membership=MembershipService(
                SQLMembershipRepository(session),
                SQLUserRepository(session),
                locks=self.membership_locks,
            ),
        )

    def dispose(self) -> None:
        if self._owns_engine:
            self.engine.dispose()
