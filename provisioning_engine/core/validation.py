#provisioning_engine\core\validation.py
"""Validation of egg variables supplied for a server."""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from provisioning_engine.core.errors import PreconditionError, ValidationError
from provisioning_engine.core.models import UserLevel
from provisioning_engine.core.repository import EggRepository
from provisioning_engine.core.rules import check_rules, parse_rules
from provisioning_engine.domain.models import EggVariable


@dataclass(frozen=True)
class ValidatedVariable:
    """Normalized value for one egg variable."""
    variable_id: Optional[int]
    key: str
    value: Any
    variable: EggVariable


def visible_variables(variables: List[EggVariable], level: UserLevel) -> List[EggVariable]:
    """Variables that apply at the given permission tier, in declared order."""
    if level == UserLevel.ADMIN:
        return list(variables)
    return [v for v in variables if v.user_viewable and v.user_editable]


class VariableValidator:
    """
    Validates environment values against an egg's variable schema.

    Values are resolved by env key, falling back to the variable default and
    then to an empty string. Output follows the egg's declared order.
    """

    def __init__(self, egg_repo: EggRepository, user_level: UserLevel = UserLevel.USER):
        self._egg_repo = egg_repo
        self._user_level = user_level

    @property
    def user_level(self) -> UserLevel:
        return self._user_level

    def set_user_level(self, level: UserLevel) -> "VariableValidator":
        """Return a validator bound to another tier; shared instances stay untouched."""
        return VariableValidator(self._egg_repo, user_level=level)

    def validate(
        self,
        egg_id: int,
        fields: Optional[Mapping[str, Any]] = None,
        enforce: bool = True,
    ) -> List[ValidatedVariable]:
        egg = self._egg_repo.get(egg_id)
        if egg is None:
            raise PreconditionError(f"Egg {egg_id} not found")

        fields = fields or {}
        variables = visible_variables(egg.ordered_variables(), self._user_level)

        results: List[ValidatedVariable] = []
        errors: Dict[str, str] = {}
        first_failure: Optional[EggVariable] = None

        for variable in variables:
            value = self._resolve_value(variable, fields)

            if enforce:
                result = check_rules(
                    parse_rules(variable.rules),
                    value,
                    attribute=variable.name,
                )
                if not result.passed:
                    errors[variable.env_variable] = result.message
                    first_failure = first_failure or variable

            results.append(
                ValidatedVariable(
                    variable_id=variable.id,
                    key=variable.env_variable,
                    value=value,
                    variable=variable,
                )
            )

        if first_failure is not None:
            raise ValidationError(
                field=first_failure.name,
                message=errors[first_failure.env_variable],
                errors=errors,
            )

        return results

    @staticmethod
    def _resolve_value(variable: EggVariable, fields: Mapping[str, Any]) -> Any:
        if variable.env_variable in fields:
            return fields[variable.env_variable]
        if variable.default_value is not None:
            return variable.default_value
        return ""
