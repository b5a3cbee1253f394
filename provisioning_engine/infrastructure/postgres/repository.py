#provisioning_engine\infrastructure\postgres\repository.py

"""SQL repository for servers and their variables using SQLAlchemy."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import insert, or_
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from provisioning_engine.config import provisioning_settings
from provisioning_engine.core.errors import PersistenceError, ServerNotFound
from provisioning_engine.core.factory import ServerFactory
from provisioning_engine.core.identifiers import UuidGenerator
from provisioning_engine.core.models import Server, ServerVariable
from provisioning_engine.core.repository import ServerRepository
from provisioning_engine.infrastructure.postgres.database import get_session_factory
from provisioning_engine.infrastructure.postgres.models import ServerORM, ServerVariableORM

logger = logging.getLogger(__name__)


# ============================================
# Mapping Functions
# ============================================

def orm_to_domain(orm: ServerORM) -> Server:
    """Convert ORM model to domain model."""
    return Server(
        id=orm.id,
        uuid=orm.uuid,
        uuid_short=orm.uuid_short,
        external_id=orm.external_id,
        name=orm.name,
        description=orm.description,
        owner_id=orm.owner_id,
        node_id=orm.node_id,
        egg_id=orm.egg_id,
        status=orm.status,
        skip_scripts=orm.skip_scripts,
        memory=orm.memory,
        swap=orm.swap,
        disk=orm.disk,
        io=orm.io,
        cpu=orm.cpu,
        threads=orm.threads,
        oom_killer=orm.oom_killer,
        ports=list(orm.ports or []),
        startup=orm.startup,
        image=orm.image,
        database_limit=orm.database_limit,
        allocation_limit=orm.allocation_limit,
        backup_limit=orm.backup_limit,
        docker_labels=dict(orm.docker_labels or {}),
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


def domain_to_orm(server: Server) -> ServerORM:
    """Convert domain model to ORM model."""
    return ServerORM(
        uuid=server.uuid,
        uuid_short=server.uuid_short,
        external_id=server.external_id,
        name=server.name,
        description=server.description,
        owner_id=server.owner_id,
        node_id=server.node_id,
        egg_id=server.egg_id,
        status=server.status,
        skip_scripts=server.skip_scripts,
        memory=server.memory,
        swap=server.swap,
        disk=server.disk,
        io=server.io,
        cpu=server.cpu,
        threads=server.threads,
        oom_killer=server.oom_killer,
        ports=server.ports,
        startup=server.startup,
        image=server.image,
        database_limit=server.database_limit,
        allocation_limit=server.allocation_limit,
        backup_limit=server.backup_limit,
        docker_labels=server.docker_labels,
        created_at=server.created_at,
        updated_at=server.updated_at,
    )


def variable_orm_to_domain(orm: ServerVariableORM) -> ServerVariable:
    return ServerVariable(
        server_id=orm.server_id,
        variable_id=orm.variable_id,
        variable_value=orm.variable_value,
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


IDENTIFIER_CONSTRAINTS = ("uq_servers_uuid", "uq_servers_uuid_short")
IDENTIFIER_COLUMNS = ("servers.uuid", "servers.uuid_short")


def is_identifier_collision(error: IntegrityError) -> bool:
    """True when the violated constraint is one of the server identifiers."""
    diag = getattr(error.orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint:
        return constraint in IDENTIFIER_CONSTRAINTS

    # SQLite reports the column instead: "UNIQUE constraint failed: servers.uuid"
    message = str(error.orig)
    return any(
        name in message for name in IDENTIFIER_CONSTRAINTS + IDENTIFIER_COLUMNS
    )


# ============================================
# Repository Implementation
# ============================================

class SqlServerRepository(ServerRepository):
    """SQLAlchemy implementation with dependency injection."""

    RETRYABLE_ERRORS = (OperationalError, IntegrityError)

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        max_attempts: Optional[int] = None,
    ):
        """
        Initialize repository with optional session factory.

        Args:
            session_factory: SQLAlchemy session factory. If None, uses default production factory.
            max_attempts: Attempts for the create transaction before giving up.
        """
        self._session_factory = session_factory
        self._max_attempts = max_attempts or provisioning_settings.transaction_attempts

    def _get_session(self) -> Session:
        """Get new session from the injected factory."""
        factory = self._session_factory or get_session_factory()
        return factory()

    # -------------------------
    # CREATE
    # -------------------------

    def create_with_variables(
        self,
        data: Dict[str, Any],
        variables: Sequence[Any],
        uuid_generator: UuidGenerator,
    ) -> Server:
        """
        Create the server and its variables in one transaction.

        Serialization failures and identifier races are retried; after
        the last attempt a PersistenceError is raised.
        """
        last_error: Optional[Exception] = None

        for attempt in range(1, self._max_attempts + 1):
            session = self._get_session()
            try:
                server = self._create_in_session(session, data, variables, uuid_generator)
                session.commit()
                logger.info(f"[server_repo] created server {server.uuid} (attempt {attempt})")
                return server
            except self.RETRYABLE_ERRORS as e:
                session.rollback()
                if isinstance(e, IntegrityError) and not is_identifier_collision(e):
                    raise PersistenceError(f"Failed to create server: {e.orig}") from e
                last_error = e
                logger.warning(
                    f"[server_repo] create attempt {attempt}/{self._max_attempts} failed: {e}"
                )
            except SQLAlchemyError as e:
                session.rollback()
                raise PersistenceError(f"Failed to create server: {e}") from e
            finally:
                session.close()

        raise PersistenceError(
            f"Failed to create server after {self._max_attempts} attempts: {last_error}"
        ) from last_error

    def _create_in_session(
        self,
        session: Session,
        data: Dict[str, Any],
        variables: Sequence[Any],
        uuid_generator: UuidGenerator,
    ) -> Server:
        uuid = uuid_generator.generate(
            in_use=lambda full, short: self._uuid_in_use(session, full, short)
        )

        orm = domain_to_orm(ServerFactory.create(uuid=uuid, data=data))
        session.add(orm)
        session.flush()

        now = datetime.now(timezone.utc)
        records = [
            {
                "server_id": orm.id,
                "variable_id": variable.variable_id,
                "variable_value": "" if variable.value is None else str(variable.value),
                "created_at": now,
                "updated_at": now,
            }
            for variable in variables
        ]
        if records:
            session.execute(insert(ServerVariableORM), records)

        return orm_to_domain(orm)

    # -------------------------
    # READ
    # -------------------------

    @staticmethod
    def _uuid_in_use(session: Session, uuid: str, uuid_short: str) -> bool:
        return session.query(ServerORM.id).filter(
            or_(ServerORM.uuid == uuid, ServerORM.uuid_short == uuid_short)
        ).first() is not None

    def uuid_in_use(self, uuid: str, uuid_short: str) -> bool:
        session = self._get_session()
        try:
            return self._uuid_in_use(session, uuid, uuid_short)
        finally:
            session.close()

    def get(self, uuid: str) -> Optional[Server]:
        """Get server by full or short identifier."""
        session = self._get_session()
        try:
            orm = session.query(ServerORM).filter(
                or_(ServerORM.uuid == uuid, ServerORM.uuid_short == uuid)
            ).first()

            if orm is None:
                return None

            return orm_to_domain(orm)
        finally:
            session.close()

    def get_by_id(self, server_id: int) -> Optional[Server]:
        session = self._get_session()
        try:
            orm = session.get(ServerORM, server_id)
            return orm_to_domain(orm) if orm else None
        finally:
            session.close()

    def list_variables(self, server_id: int) -> List[ServerVariable]:
        session = self._get_session()
        try:
            orms = session.query(ServerVariableORM).filter(
                ServerVariableORM.server_id == server_id
            ).order_by(ServerVariableORM.id.asc()).all()
            return [variable_orm_to_domain(orm) for orm in orms]
        finally:
            session.close()

    def count(self) -> int:
        session = self._get_session()
        try:
            return session.query(ServerORM).count()
        finally:
            session.close()

    # -------------------------
    # UPDATE
    # -------------------------

    def update_variable(
        self,
        server_id: int,
        variable_id: int,
        value: str,
    ) -> ServerVariable:
        session = self._get_session()
        try:
            if session.get(ServerORM, server_id) is None:
                raise ServerNotFound(f"Server {server_id} not found")

            orm = session.query(ServerVariableORM).filter(
                ServerVariableORM.server_id == server_id,
                ServerVariableORM.variable_id == variable_id,
            ).first()

            if orm is None:
                orm = ServerVariableORM(
                    server_id=server_id,
                    variable_id=variable_id,
                    variable_value=value,
                )
                session.add(orm)
            else:
                orm.variable_value = value
                orm.updated_at = datetime.now(timezone.utc)

            session.commit()
            return variable_orm_to_domain(orm)
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError(f"Failed to update variable: {e}") from e
        finally:
            session.close()

    # -------------------------
    # DELETE
    # -------------------------

    def delete(self, server_id: int) -> bool:
        session = self._get_session()
        try:
            orm = session.get(ServerORM, server_id)
            if orm is None:
                return False

            session.query(ServerVariableORM).filter(
                ServerVariableORM.server_id == server_id
            ).delete(synchronize_session=False)
            session.delete(orm)
            session.commit()
            logger.info(f"[server_repo] deleted server {orm.uuid}")
            return True
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError(f"Failed to delete server {server_id}: {e}") from e
        finally:
            session.close()
