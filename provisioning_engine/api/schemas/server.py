from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from provisioning_engine.core.models import Server


class ServerCreateRequest(BaseModel):
    name: str
    owner_id: int
    node_id: int
    egg_id: int

    external_id: Optional[str] = None
    description: Optional[str] = None

    memory: int = Field(default=0, ge=0)
    swap: int = Field(default=0, ge=-1)
    disk: int = Field(default=0, ge=0)
    io: int = Field(default=500, ge=10, le=1000)
    cpu: int = Field(default=0, ge=0)
    threads: Optional[str] = None
    oom_killer: Optional[bool] = None
    oom_disabled: Optional[bool] = None

    ports: List[str] = Field(default_factory=list)

    startup: Optional[str] = None
    image: Optional[str] = None
    environment: Dict[str, Any] = Field(default_factory=dict)
    skip_scripts: bool = False
    start_on_completion: bool = True

    database_limit: int = Field(default=0, ge=0)
    allocation_limit: int = Field(default=0, ge=0)
    backup_limit: int = Field(default=0, ge=0)
    docker_labels: Dict[str, str] = Field(default_factory=dict)

    validate_variables: bool = True


class ServerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: str
    uuid_short: str
    external_id: Optional[str]
    name: str
    description: str
    owner_id: Optional[int]
    node_id: Optional[int]
    egg_id: Optional[int]
    status: Optional[str]
    memory: int
    swap: int
    disk: int
    io: int
    cpu: int
    threads: Optional[str]
    oom_killer: bool
    ports: List[str]
    startup: str
    image: str
    database_limit: int
    allocation_limit: int
    backup_limit: int
    created_at: datetime

    @classmethod
    def from_server(cls, server: Server) -> "ServerResponse":
        return cls(
            id=server.id,
            uuid=server.uuid,
            uuid_short=server.uuid_short,
            external_id=server.external_id,
            name=server.name,
            description=server.description,
            owner_id=server.owner_id,
            node_id=server.node_id,
            egg_id=server.egg_id,
            status=server.status.value if server.status else None,
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
            created_at=server.created_at,
        )


class StartupVariableUpdate(BaseModel):
    key: str
    value: Optional[str] = None


class StartupVariableResponse(BaseModel):
    env_variable: str
    name: str
    value: str
    rules: str
    is_editable: bool
    options: List[str] = Field(default_factory=list)
