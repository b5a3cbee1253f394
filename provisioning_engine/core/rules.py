"""
Interpreter for the pipe-delimited variable rule language.

Eggs declare rules like ``required|string|in:vanilla,paper``. Parsing turns the
expression into an ordered list of ``RuleSpec``; ``check_rules`` evaluates them
against one value without side effects.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional, Tuple

from provisioning_engine.core.errors import UnsupportedRuleError


@dataclass(frozen=True)
class RuleSpec:
    """One parsed rule: name plus its comma separated arguments."""
    name: str
    args: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ValidationResult:
    passed: bool
    message: Optional[str] = None
    rule: Optional[str] = None


# -------------------------
# PARSING
# -------------------------

def parse_rules(expression: Optional[str]) -> List[RuleSpec]:
    """Parse ``a|b:x,y`` into rule specs, rejecting unknown rule names."""
    if not expression:
        return []

    rules: List[RuleSpec] = []
    for chunk in _split_expression(expression):
        chunk = chunk.strip()
        if not chunk:
            continue

        name, _, raw_args = chunk.partition(":")
        name = name.strip().lower()

        if name not in _CHECKS and name not in _MARKERS:
            raise UnsupportedRuleError(f"Unsupported validation rule '{name}'")

        if name == "regex":
            args: Tuple[str, ...] = (raw_args,)
        elif raw_args:
            args = tuple(arg.strip() for arg in raw_args.split(","))
        else:
            args = ()

        rules.append(RuleSpec(name=name, args=args))

    return rules


def _split_expression(expression: str) -> List[str]:
    """Split on pipes, except inside a /.../ regex literal."""
    parts = []
    current = []
    in_regex = False
    i = 0

    while i < len(expression):
        char = expression[i]
        if char == "|" and not in_regex:
            parts.append("".join(current))
            current = []
        else:
            if "".join(current).strip().lower() == "regex:" and char == "/":
                in_regex = True
            elif in_regex and char == "/" and expression[i - 1] != "\\":
                in_regex = False
            current.append(char)
        i += 1

    parts.append("".join(current))
    return parts


def options_from_rules(expression: Optional[str]) -> List[str]:
    """Values allowed by the ``in:`` rule, or an empty list."""
    options: List[str] = []
    for rule in parse_rules(expression):
        if rule.name == "in":
            options = list(rule.args)
    return options


# -------------------------
# EVALUATION
# -------------------------

def check_rules(
    rules: List[RuleSpec],
    value: Any,
    attribute: str = "value",
) -> ValidationResult:
    """
    Evaluate rules in order and stop at the first failure.

    Blank values only fail ``required``; every other rule is skipped for them.
    """
    names = {rule.name for rule in rules}
    numeric = bool(names & {"numeric", "integer"})

    if _is_blank(value):
        if "required" in names:
            return ValidationResult(
                passed=False,
                message=f"The {attribute} field is required.",
                rule="required",
            )
        return ValidationResult(passed=True)

    for rule in rules:
        if rule.name in _MARKERS:
            continue

        check = _CHECKS[rule.name]
        message = check(value, rule.args, attribute, numeric)
        if message is not None:
            return ValidationResult(passed=False, message=message, rule=rule.name)

    return ValidationResult(passed=True)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def _as_number(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _measure(value: Any, numeric: bool) -> Optional[Decimal]:
    if numeric:
        return _as_number(value)
    if isinstance(value, (list, tuple, dict)):
        return Decimal(len(value))
    return Decimal(len(str(value)))


def _unit(numeric: bool) -> str:
    return "" if numeric else " characters"


# -------------------------
# RULE CHECKS
# Each returns None on success or an error message.
# -------------------------

def _check_string(value, args, attribute, numeric):
    if not isinstance(value, str):
        return f"The {attribute} field must be a string."
    return None


def _check_numeric(value, args, attribute, numeric):
    number = _as_number(value)
    if number is None:
        return f"The {attribute} field must be a number."
    return None


def _check_integer(value, args, attribute, numeric):
    if isinstance(value, bool):
        return f"The {attribute} field must be an integer."
    if isinstance(value, int):
        return None
    if not re.fullmatch(r"[+-]?\d+", str(value).strip()):
        return f"The {attribute} field must be an integer."
    return None


_BOOLEAN_VALUES = {True, False, 0, 1, "0", "1", "true", "false"}


def _check_boolean(value, args, attribute, numeric):
    # Only scalars can match; containers are unhashable
    if not isinstance(value, (bool, int, str)):
        return f"The {attribute} field must be true or false."
    candidate = value.lower() if isinstance(value, str) else value
    if candidate not in _BOOLEAN_VALUES:
        return f"The {attribute} field must be true or false."
    return None


def _check_alpha_num(value, args, attribute, numeric):
    if not re.fullmatch(r"[^\W_]+", str(value)):
        return f"The {attribute} field must only contain letters and numbers."
    return None


def _check_alpha_dash(value, args, attribute, numeric):
    if not re.fullmatch(r"[\w-]+", str(value)):
        return (
            f"The {attribute} field must only contain letters, numbers, "
            f"dashes, and underscores."
        )
    return None


def _compile_regex(raw: str) -> "re.Pattern":
    if len(raw) >= 2 and raw[0] == "/":
        end = raw.rfind("/")
        if end > 0:
            body, modifiers = raw[1:end], raw[end + 1:]
            flags = 0
            if "i" in modifiers:
                flags |= re.IGNORECASE
            if "m" in modifiers:
                flags |= re.MULTILINE
            if "s" in modifiers:
                flags |= re.DOTALL
            if "x" in modifiers:
                flags |= re.VERBOSE
            return re.compile(body, flags)
    return re.compile(raw)


def _check_regex(value, args, attribute, numeric):
    try:
        pattern = _compile_regex(args[0] if args else "")
    except re.error:
        return f"The {attribute} field format is invalid."
    if not pattern.search(str(value)):
        return f"The {attribute} field format is invalid."
    return None


def _check_in(value, args, attribute, numeric):
    if str(value) not in args:
        return f"The selected {attribute} is invalid."
    return None


def _check_not_in(value, args, attribute, numeric):
    if str(value) in args:
        return f"The selected {attribute} is invalid."
    return None


def _bound(args, index: int) -> Decimal:
    try:
        return Decimal(args[index])
    except (IndexError, InvalidOperation):
        raise UnsupportedRuleError(f"Rule argument {args!r} is not a number") from None


def _check_min(value, args, attribute, numeric):
    size = _measure(value, numeric)
    limit = _bound(args, 0)
    if size is None or size < limit:
        return f"The {attribute} field must be at least {args[0]}{_unit(numeric)}."
    return None


def _check_max(value, args, attribute, numeric):
    size = _measure(value, numeric)
    limit = _bound(args, 0)
    if size is None or size > limit:
        return f"The {attribute} field must not be greater than {args[0]}{_unit(numeric)}."
    return None


def _check_between(value, args, attribute, numeric):
    size = _measure(value, numeric)
    low, high = _bound(args, 0), _bound(args, 1)
    if size is None or not (low <= size <= high):
        return (
            f"The {attribute} field must be between {args[0]} and "
            f"{args[1]}{_unit(numeric)}."
        )
    return None


def _check_size(value, args, attribute, numeric):
    size = _measure(value, numeric)
    if size is None or size != _bound(args, 0):
        return f"The {attribute} field must be {args[0]}{_unit(numeric)}."
    return None


_CHECKS: Dict[str, Callable[..., Optional[str]]] = {
    "string": _check_string,
    "numeric": _check_numeric,
    "integer": _check_integer,
    "boolean": _check_boolean,
    "alpha_num": _check_alpha_num,
    "alpha_dash": _check_alpha_dash,
    "regex": _check_regex,
    "in": _check_in,
    "not_in": _check_not_in,
    "min": _check_min,
    "max": _check_max,
    "between": _check_between,
    "size": _check_size,
}

# Rules that only change how other rules are applied.
_MARKERS = {"required", "nullable", "sometimes"}
