"""Core domain models (servers and their variables)."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class ServerState(Enum):
    """Pending server state. A fully installed server has no state (None)."""

    INSTALLING = "installing"
    INSTALL_FAILED = "install_failed"
    REINSTALL_FAILED = "reinstall_failed"
    SUSPENDED = "suspended"
    RESTORING_BACKUP = "restoring_backup"


class UserLevel(Enum):
    """Permission tier used when resolving which egg variables apply."""

    USER = "user"
    ADMIN = "admin"


@dataclass
class Server:
    """Provisioned game server record."""

    # Identity
    id: Optional[int]
    uuid: str
    uuid_short: str
    external_id: Optional[str] = None

    # Ownership / placement
    name: str = ""
    description: str = ""
    owner_id: Optional[int] = None
    node_id: Optional[int] = None
    egg_id: Optional[int] = None

    # State
    status: Optional[ServerState] = ServerState.INSTALLING
    skip_scripts: bool = False

    # Resource limits
    memory: int = 0
    swap: int = 0
    disk: int = 0
    io: int = 500
    cpu: int = 0
    threads: Optional[str] = None
    oom_killer: bool = False

    # Networking
    ports: List[str] = field(default_factory=list)

    # Runtime
    startup: str = ""
    image: str = ""

    # Soft limits
    database_limit: int = 0
    allocation_limit: int = 0
    backup_limit: int = 0

    docker_labels: Dict[str, Any] = field(default_factory=dict)

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_installed(self) -> bool:
        return self.status is None


@dataclass
class ServerVariable:
    """Materialized (server, egg variable, value) triple."""

    server_id: int
    variable_id: int
    variable_value: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
