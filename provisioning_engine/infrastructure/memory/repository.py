# provisioning_engine/infrastructure/memory/repository.py

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count
from threading import Lock
from typing import Any, Dict, List, Optional, Sequence, Tuple

from provisioning_engine.core.errors import PersistenceError, ServerNotFound
from provisioning_engine.core.factory import ServerFactory
from provisioning_engine.core.identifiers import UuidGenerator
from provisioning_engine.core.models import Server, ServerVariable
from provisioning_engine.core.repository import EggRepository, NodeRepository, ServerRepository
from provisioning_engine.domain.models import Egg, Node


class InMemoryServerRepository(ServerRepository):
    """Process-local store. The lock stands in for transactional isolation."""

    def __init__(self):
        self._servers: Dict[int, Server] = {}
        self._variables: Dict[Tuple[int, int], ServerVariable] = {}
        self._ids = count(1)
        self._lock = Lock()

    def create_with_variables(
        self,
        data: Dict[str, Any],
        variables: Sequence[Any],
        uuid_generator: UuidGenerator,
    ) -> Server:
        with self._lock:
            uuid = uuid_generator.generate(in_use=self._uuid_in_use)
            server = replace(ServerFactory.create(uuid=uuid, data=data), id=next(self._ids))

            now = datetime.now(timezone.utc)
            rows = {}
            for variable in variables:
                key = (server.id, variable.variable_id)
                if key in rows:
                    raise PersistenceError(f"Duplicate variable {variable.variable_id} for server")
                rows[key] = ServerVariable(
                    server_id=server.id,
                    variable_id=variable.variable_id,
                    variable_value="" if variable.value is None else str(variable.value),
                    created_at=now,
                    updated_at=now,
                )

            self._servers[server.id] = server
            self._variables.update(rows)
            return replace(server)

    def _uuid_in_use(self, uuid: str, uuid_short: str) -> bool:
        return any(
            s.uuid == uuid or s.uuid_short == uuid_short
            for s in self._servers.values()
        )

    def uuid_in_use(self, uuid: str, uuid_short: str) -> bool:
        with self._lock:
            return self._uuid_in_use(uuid, uuid_short)

    def get(self, uuid: str) -> Optional[Server]:
        with self._lock:
            for server in self._servers.values():
                if uuid in (server.uuid, server.uuid_short):
                    return replace(server)
            return None

    def get_by_id(self, server_id: int) -> Optional[Server]:
        with self._lock:
            server = self._servers.get(server_id)
            return replace(server) if server else None

    def list_variables(self, server_id: int) -> List[ServerVariable]:
        with self._lock:
            return [
                replace(v) for (sid, _), v in self._variables.items()
                if sid == server_id
            ]

    def update_variable(self, server_id: int, variable_id: int, value: str) -> ServerVariable:
        with self._lock:
            if server_id not in self._servers:
                raise ServerNotFound(f"Server {server_id} not found")

            key = (server_id, variable_id)
            existing = self._variables.get(key)
            now = datetime.now(timezone.utc)
            if existing is None:
                existing = ServerVariable(server_id=server_id, variable_id=variable_id, created_at=now)
            self._variables[key] = replace(existing, variable_value=value, updated_at=now)
            return replace(self._variables[key])

    def delete(self, server_id: int) -> bool:
        with self._lock:
            if self._servers.pop(server_id, None) is None:
                return False
            for key in [k for k in self._variables if k[0] == server_id]:
                del self._variables[key]
            return True

    def count(self) -> int:
        with self._lock:
            return len(self._servers)


class InMemoryEggRepository(EggRepository):
    def __init__(self):
        self._eggs: Dict[int, Egg] = {}
        self._egg_ids = count(1)
        self._variable_ids = count(1)
        self._lock = Lock()

    def create(self, egg: Egg) -> Egg:
        with self._lock:
            egg_id = next(self._egg_ids)
            stored = replace(
                egg,
                id=egg_id,
                variables=[
                    replace(
                        v,
                        id=next(self._variable_ids),
                        egg_id=egg_id,
                        sort=v.sort if v.sort else index,
                    )
                    for index, v in enumerate(egg.variables)
                ],
            )
            self._eggs[egg_id] = stored
            return stored

    def get(self, egg_id: int) -> Optional[Egg]:
        return self._eggs.get(egg_id)


class InMemoryNodeRepository(NodeRepository):
    def __init__(self):
        self._nodes: Dict[int, Node] = {}
        self._ids = count(1)
        self._lock = Lock()

    def create(self, node: Node) -> Node:
        with self._lock:
            stored = replace(node, id=next(self._ids))
            self._nodes[stored.id] = stored
            return stored

    def get(self, node_id: int) -> Optional[Node]:
        return self._nodes.get(node_id)
