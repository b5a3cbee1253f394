"""Egg and node repository implementations."""

import logging
from typing import Optional
from uuid import uuid4

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from provisioning_engine.core.errors import EggAlreadyExists, PersistenceError
from provisioning_engine.core.repository import EggRepository, NodeRepository
from provisioning_engine.domain.models import Egg, EggVariable, Node
from provisioning_engine.infrastructure.postgres.database import get_session_factory
from provisioning_engine.infrastructure.postgres.models import EggORM, EggVariableORM, NodeORM

logger = logging.getLogger(__name__)


# ============================================
# MAPPING FUNCTIONS
# ============================================

def egg_to_orm(egg: Egg) -> EggORM:
    """Convert egg domain model to ORM."""
    return EggORM(
        uuid=egg.uuid or str(uuid4()),
        name=egg.name,
        author=egg.author,
        description=egg.description,
        docker_images=dict(egg.docker_images),
        startup=egg.startup,
        created_at=egg.created_at,
        updated_at=egg.updated_at,
        variables=[
            EggVariableORM(
                sort=variable.sort if variable.sort else index,
                name=variable.name,
                description=variable.description,
                env_variable=variable.env_variable,
                default_value=variable.default_value,
                user_viewable=variable.user_viewable,
                user_editable=variable.user_editable,
                rules=variable.rules,
            )
            for index, variable in enumerate(egg.variables)
        ],
    )


def orm_to_egg(orm: EggORM) -> Egg:
    """Convert ORM to egg domain model."""
    return Egg(
        id=orm.id,
        uuid=orm.uuid,
        name=orm.name,
        author=orm.author,
        description=orm.description,
        docker_images=dict(orm.docker_images or {}),
        startup=orm.startup,
        created_at=orm.created_at,
        updated_at=orm.updated_at,
        variables=[
            EggVariable(
                id=variable.id,
                egg_id=variable.egg_id,
                sort=variable.sort,
                name=variable.name,
                description=variable.description,
                env_variable=variable.env_variable,
                default_value=variable.default_value,
                user_viewable=variable.user_viewable,
                user_editable=variable.user_editable,
                rules=variable.rules,
            )
            for variable in orm.variables
        ],
    )


def orm_to_node(orm: NodeORM) -> Node:
    return Node(
        id=orm.id,
        name=orm.name,
        fqdn=orm.fqdn,
        scheme=orm.scheme,
        daemon_listen=orm.daemon_listen,
        daemon_token=orm.daemon_token,
        created_at=orm.created_at,
    )


# ============================================
# EGG REPOSITORY
# ============================================

class SqlEggRepository(EggRepository):
    """Repository for eggs and their variables."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory

    def _get_session(self):
        return (self._session_factory or get_session_factory())()

    def create(self, egg: Egg) -> Egg:
        """Create a new egg with its variables."""
        session = self._get_session()
        try:
            orm = egg_to_orm(egg)
            session.add(orm)
            session.commit()
            logger.info(f"[egg_repo] created egg {orm.id} ({orm.name})")
            return orm_to_egg(orm)
        except IntegrityError as e:
            session.rollback()
            raise EggAlreadyExists(f"Egg {egg.name} already exists") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError(f"Failed to create egg: {e}") from e
        finally:
            session.close()

    def get(self, egg_id: int) -> Optional[Egg]:
        """Get egg by ID."""
        session = self._get_session()
        try:
            orm = session.get(EggORM, egg_id)
            if not orm:
                return None
            return orm_to_egg(orm)
        finally:
            session.close()


# ============================================
# NODE REPOSITORY
# ============================================

class SqlNodeRepository(NodeRepository):
    """Repository for daemon nodes."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory

    def _get_session(self):
        return (self._session_factory or get_session_factory())()

    def create(self, node: Node) -> Node:
        """Register a new node."""
        session = self._get_session()
        try:
            orm = NodeORM(
                name=node.name,
                fqdn=node.fqdn,
                scheme=node.scheme,
                daemon_listen=node.daemon_listen,
                daemon_token=node.daemon_token,
                created_at=node.created_at,
            )
            session.add(orm)
            session.commit()
            logger.info(f"[node_repo] registered node {orm.id} ({orm.name})")
            return orm_to_node(orm)
        except IntegrityError as e:
            session.rollback()
            raise PersistenceError(f"Node {node.name} already exists") from e
        finally:
            session.close()

    def get(self, node_id: int) -> Optional[Node]:
        """Get node by ID."""
        session = self._get_session()
        try:
            orm = session.get(NodeORM, node_id)
            if not orm:
                return None
            return orm_to_node(orm)
        finally:
            session.close()
