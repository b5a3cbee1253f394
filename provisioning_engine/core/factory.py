#provisioning_engine\core\factory.py
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from provisioning_engine.core.endpoint import Endpoint
from provisioning_engine.core.identifiers import short_uuid
from provisioning_engine.core.models import Server, ServerState


def normalize_ports(ports: Iterable[Any]) -> List[str]:
    """Validate every port entry and return their canonical string forms."""
    return [str(port if isinstance(port, Endpoint) else Endpoint(port)) for port in ports]


class ServerFactory:
    @staticmethod
    def create(*, uuid: str, data: Dict[str, Any]) -> Server:
        """Build a new INSTALLING server from raw creation data."""
        now = datetime.now(timezone.utc)

        return Server(
            id=None,
            uuid=uuid,
            uuid_short=short_uuid(uuid),
            external_id=data.get("external_id"),
            name=data.get("name") or "",
            description=data.get("description") or "",
            owner_id=data.get("owner_id"),
            node_id=data.get("node_id"),
            egg_id=data.get("egg_id"),
            status=ServerState.INSTALLING,
            skip_scripts=bool(data.get("skip_scripts") or False),
            memory=data.get("memory") or 0,
            swap=data.get("swap") or 0,
            disk=data.get("disk") or 0,
            io=data.get("io") or 500,
            cpu=data.get("cpu") or 0,
            threads=data.get("threads"),
            oom_killer=bool(data.get("oom_killer") or False),
            ports=normalize_ports(data.get("ports") or []),
            startup=data.get("startup") or "",
            image=data.get("image") or "",
            database_limit=data.get("database_limit") or 0,
            allocation_limit=data.get("allocation_limit") or 0,
            backup_limit=data.get("backup_limit") or 0,
            docker_labels=data.get("docker_labels") or {},
            created_at=now,
            updated_at=now,
        )
