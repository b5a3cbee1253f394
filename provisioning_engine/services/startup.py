"""Startup variable edits for an existing server."""

import logging
from typing import Any, List, Tuple

from provisioning_engine.core.errors import PreconditionError, ServerNotFound, ValidationError
from provisioning_engine.core.models import ServerVariable, UserLevel
from provisioning_engine.core.repository import EggRepository, ServerRepository
from provisioning_engine.core.rules import check_rules, options_from_rules, parse_rules
from provisioning_engine.core.validation import visible_variables
from provisioning_engine.domain.models import EggVariable

logger = logging.getLogger(__name__)


def select_options(variable: EggVariable) -> List[str]:
    """Choices for a variable restricted by an ``in:`` rule."""
    return options_from_rules(variable.rules)


class StartupVariableService:
    """Lets a server owner change the values of editable egg variables."""

    def __init__(
        self,
        server_repo: ServerRepository,
        egg_repo: EggRepository,
        user_level: UserLevel = UserLevel.USER,
    ):
        self._server_repo = server_repo
        self._egg_repo = egg_repo
        self._user_level = user_level

    def list_variables(self, server_uuid: str) -> List[Tuple[EggVariable, str]]:
        """Viewable variables with the server's current values."""
        server, egg = self._load(server_uuid)
        values = {
            v.variable_id: v.variable_value
            for v in self._server_repo.list_variables(server.id)
        }
        return [
            (variable, values.get(variable.id, variable.default_value or ""))
            for variable in egg.ordered_variables()
            if self._user_level == UserLevel.ADMIN or variable.user_viewable
        ]

    def is_editable(self, variable: EggVariable) -> bool:
        return self._user_level == UserLevel.ADMIN or variable.user_editable

    def update(self, server_uuid: str, env_variable: str, value: Any) -> ServerVariable:
        server, egg = self._load(server_uuid)

        variable = next(
            (
                v for v in visible_variables(egg.ordered_variables(), self._user_level)
                if v.env_variable == env_variable
            ),
            None,
        )
        if variable is None:
            raise PreconditionError(
                f"Variable {env_variable} does not exist or is not editable"
            )

        result = check_rules(parse_rules(variable.rules), value, attribute=variable.name)
        if not result.passed:
            raise ValidationError(field=variable.name, message=result.message)

        updated = self._server_repo.update_variable(
            server.id,
            variable.id,
            "" if value is None else str(value),
        )
        logger.info(f"[startup] {server.uuid_short} {env_variable} updated")
        return updated

    def _load(self, server_uuid: str):
        server = self._server_repo.get(server_uuid)
        if server is None:
            raise ServerNotFound(f"Server {server_uuid} not found")

        egg = self._egg_repo.get(server.egg_id)
        if egg is None:
            raise PreconditionError(f"Egg {server.egg_id} not found")
        return server, egg
