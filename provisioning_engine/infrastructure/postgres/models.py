#provisioning_engine\infrastructure\postgres\models.py
"""SQLAlchemy ORM models for database tables."""

from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, DateTime, JSON, Enum as SQLEnum, Index, Text, Boolean,
    ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from provisioning_engine.core.models import ServerState
from provisioning_engine.infrastructure.postgres.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================
# NODES
# ============================================

class NodeORM(Base):
    """Machines running the daemon."""

    __tablename__ = "nodes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    fqdn = Column(String(255), nullable=False)
    scheme = Column(String(10), nullable=False, default="https")
    daemon_listen = Column(Integer, nullable=False, default=8080)
    daemon_token = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ============================================
# EGGS
# ============================================

class EggORM(Base):
    """Egg (server template) table."""

    __tablename__ = "eggs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(String(36), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    docker_images = Column(JSON, nullable=False)  # label -> image, ordered
    startup = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    variables = relationship(
        "EggVariableORM",
        back_populates="egg",
        order_by="[EggVariableORM.sort, EggVariableORM.id]",
        cascade="all, delete-orphan",
    )


class EggVariableORM(Base):
    """Variables declared by an egg."""

    __tablename__ = "egg_variables"

    id = Column(Integer, primary_key=True, autoincrement=True)
    egg_id = Column(Integer, ForeignKey("eggs.id", ondelete="CASCADE"), nullable=False)
    sort = Column(Integer, nullable=False, default=0)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    env_variable = Column(String(255), nullable=False)
    default_value = Column(Text, nullable=True)
    user_viewable = Column(Boolean, nullable=False, default=True)
    user_editable = Column(Boolean, nullable=False, default=True)
    rules = Column(Text, nullable=False, default="")

    egg = relationship("EggORM", back_populates="variables")

    __table_args__ = (
        UniqueConstraint("egg_id", "env_variable", name="uq_egg_variables_egg_env"),
    )


# ============================================
# SERVERS
# ============================================

class ServerORM(Base):
    """
    Server table.

    Indexes:
    - Unique on uuid and uuid_short (identifier collisions fail the insert)
    - Index on node_id for per-node listings
    - Index on owner_id for per-user listings
    """

    __tablename__ = "servers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(String(36), nullable=False)
    uuid_short = Column(String(8), nullable=False)
    external_id = Column(String(255), nullable=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    owner_id = Column(Integer, nullable=True, index=True)
    node_id = Column(Integer, ForeignKey("nodes.id"), nullable=False, index=True)
    egg_id = Column(Integer, ForeignKey("eggs.id"), nullable=False)

    status = Column(SQLEnum(ServerState, name="server_state"), nullable=True)
    skip_scripts = Column(Boolean, nullable=False, default=False)

    # Resource limits
    memory = Column(Integer, nullable=False, default=0)
    swap = Column(Integer, nullable=False, default=0)
    disk = Column(Integer, nullable=False, default=0)
    io = Column(Integer, nullable=False, default=500)
    cpu = Column(Integer, nullable=False, default=0)
    threads = Column(String(255), nullable=True)
    oom_killer = Column(Boolean, nullable=False, default=False)

    ports = Column(JSON, nullable=False)

    startup = Column(Text, nullable=False)
    image = Column(String(255), nullable=False)

    database_limit = Column(Integer, nullable=False, default=0)
    allocation_limit = Column(Integer, nullable=False, default=0)
    backup_limit = Column(Integer, nullable=False, default=0)

    docker_labels = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    variables = relationship(
        "ServerVariableORM",
        back_populates="server",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("uuid", name="uq_servers_uuid"),
        UniqueConstraint("uuid_short", name="uq_servers_uuid_short"),
        UniqueConstraint("external_id", name="uq_servers_external_id"),
        Index("ix_servers_node_status", "node_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<ServerORM(id={self.id}, uuid={self.uuid}, "
            f"status={self.status.value if self.status else None})>"
        )


class ServerVariableORM(Base):
    """Value of one egg variable for one server."""

    __tablename__ = "server_variables"

    id = Column(Integer, primary_key=True, autoincrement=True)
    server_id = Column(Integer, ForeignKey("servers.id", ondelete="CASCADE"), nullable=False)
    variable_id = Column(Integer, ForeignKey("egg_variables.id", ondelete="CASCADE"), nullable=False)
    variable_value = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    server = relationship("ServerORM", back_populates="variables")

    __table_args__ = (
        UniqueConstraint("server_id", "variable_id", name="uq_server_variables_server_variable"),
    )
