#provisioning_engine\domain\models.py
"""Domain models for eggs (server templates) and nodes."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional


# ============================================
# EGG
# ============================================

@dataclass
class EggVariable:
    """Variable declared by an egg."""
    name: str
    env_variable: str
    rules: str = ""
    description: str = ""
    default_value: Optional[str] = None
    user_viewable: bool = True
    user_editable: bool = True
    sort: int = 0

    id: Optional[int] = None
    egg_id: Optional[int] = None

    @property
    def rule_list(self) -> List[str]:
        return [rule for rule in self.rules.split("|") if rule]

    @property
    def is_required(self) -> bool:
        return "required" in self.rule_list


@dataclass
class Egg:
    """Declarative definition of a workload type."""
    name: str
    author: str
    startup: str

    # label -> image, first entry is the default
    docker_images: Dict[str, str] = field(default_factory=dict)
    description: Optional[str] = None

    variables: List[EggVariable] = field(default_factory=list)

    id: Optional[int] = None
    uuid: Optional[str] = None

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def default_image(self) -> Optional[str]:
        return next(iter(self.docker_images.values()), None)

    def ordered_variables(self) -> List[EggVariable]:
        # sorted() is stable, so ties keep their declared order
        return sorted(self.variables, key=lambda v: v.sort)


# ============================================
# NODE
# ============================================

@dataclass
class Node:
    """Machine running the daemon."""
    name: str
    fqdn: str
    daemon_token: str
    scheme: str = "https"
    daemon_listen: int = 8080

    id: Optional[int] = None

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def daemon_url(self) -> str:
        return f"{self.scheme}://{self.fqdn}:{self.daemon_listen}"
