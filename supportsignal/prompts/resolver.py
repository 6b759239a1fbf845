"""Template variable extraction, validation and substitution.

Templates use ``{{name}}`` placeholders; dotted paths such as
``{{incident.location}}`` look up nested dictionary values.
"""

import math
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

VARIABLE_PATTERN = r"[a-zA-Z][a-zA-Z0-9_]*(?:\.[a-zA-Z][a-zA-Z0-9_]*)*"
VARIABLE_REGEX = re.compile(r"\{\{(" + VARIABLE_PATTERN + r")\}\}")
PLACEHOLDER_REGEX = re.compile(r"\{\{([^}]*)\}\}")
VARIABLE_NAME_REGEX = re.compile(r"^" + VARIABLE_PATTERN + r"$")

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


@dataclass
class VariableDefinition:
    """Declared template variable."""

    name: str
    description: str
    type: str = "string"  # string | number | boolean
    required: bool = False
    default_value: Optional[str] = None


@dataclass
class PromptResolutionResult:
    resolved_prompt: str
    variables_used: Dict[str, Any] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    processing_time_ms: int = 0


def extract_variables(template: str) -> List[str]:
    """Return unique placeholder names in order of first appearance."""
    variables: List[str] = []
    for match in VARIABLE_REGEX.finditer(template):
        if match.group(1) not in variables:
            variables.append(match.group(1))
    return variables


def validate_template(template: str, definitions: List[VariableDefinition]) -> List[str]:
    """Check a template against its variable definitions.

    Returns:
        Errors for undefined placeholders and for required variables the
        template never references.
    """
    errors = []
    template_vars = extract_variables(template)
    defined = {d.name for d in definitions}

    for var in template_vars:
        if var.split(".")[0] not in defined:
            errors.append(f"Template uses undefined variable: {var}")

    for definition in definitions:
        if definition.required and not any(v.startswith(definition.name) for v in template_vars):
            errors.append(f'Required variable "{definition.name}" not found in template')

    return errors


def get_nested_value(obj: Any, path: str) -> Any:
    """Follow a dotted path through nested dictionaries; None if any hop is missing."""
    current = obj
    for key in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def validate_and_convert_value(value: Any, type_: str, var_name: str) -> Tuple[Any, Optional[str]]:
    """Coerce a value to a declared type.

    Returns:
        ``(converted, error)``; ``error`` is None on success.
    """
    if value is None:
        return None, None

    if type_ == "number":
        if isinstance(value, bool):
            return None, f'Variable "{var_name}" cannot be converted to number: {value}'
        if isinstance(value, (int, float)):
            return value, None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None, f'Variable "{var_name}" cannot be converted to number: {value}'
        if math.isnan(number):
            return None, f'Variable "{var_name}" cannot be converted to number: {value}'
        return int(number) if number.is_integer() else number, None

    if type_ == "boolean":
        if isinstance(value, bool):
            return value, None
        text = str(value).lower()
        if text in TRUE_VALUES:
            return True, None
        if text in FALSE_VALUES:
            return False, None
        return None, f'Variable "{var_name}" cannot be converted to boolean: {value}'

    return str(value), None


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def resolve_prompt(
    template: str,
    variables: Dict[str, Any],
    definitions: List[VariableDefinition],
) -> PromptResolutionResult:
    """Substitute variables into a template.

    Defaults fill in missing variables, then required variables are checked.
    Placeholders that cannot be resolved are left in place and reported in
    ``errors`` instead of raising.
    """
    start = time.monotonic()
    errors = validate_template(template, definitions)
    used: Dict[str, Any] = {}
    lookup = dict(variables)
    by_name = {d.name: d for d in definitions}

    for definition in definitions:
        if definition.name not in lookup and definition.default_value is not None:
            value, error = validate_and_convert_value(definition.default_value, definition.type, definition.name)
            if error:
                errors.append(f"Default value error: {error}")
            else:
                lookup[definition.name] = value

    for definition in definitions:
        if definition.required and definition.name not in lookup:
            errors.append(f'Required variable "{definition.name}" is missing')

    def replace(match: re.Match) -> str:
        path = match.group(1)
        value = get_nested_value(lookup, path)
        if value is None:
            errors.append(f'Variable "{path}" resolved to null/undefined')
            return match.group(0)

        definition = by_name.get(path.split(".")[0])
        if definition:
            value, error = validate_and_convert_value(value, definition.type, path)
            if error:
                errors.append(error)
                return match.group(0)

        used[path] = value
        return _render(value)

    resolved = VARIABLE_REGEX.sub(replace, template)

    return PromptResolutionResult(
        resolved_prompt=resolved,
        variables_used=used,
        errors=errors,
        processing_time_ms=int((time.monotonic() - start) * 1000),
    )


def validate_template_syntax(template: str) -> List[str]:
    """Report unmatched braces, empty placeholders and malformed names."""
    errors = []
    opening = template.count("{{")
    closing = template.count("}}")
    if opening != closing:
        errors.append(f"Unmatched braces: {opening} opening, {closing} closing")

    for match in PLACEHOLDER_REGEX.finditer(template):
        name = match.group(1).strip()
        if not name:
            errors.append("Empty variable placeholder found: {{}}")
            continue
        if not VARIABLE_NAME_REGEX.match(name):
            errors.append(f"Invalid variable name format: {name}")

    return errors


def analyze_template(template: str) -> Dict[str, Any]:
    variables = extract_variables(template)
    return {
        "variables": variables,
        "syntax_errors": validate_template_syntax(template),
        "estimated_complexity": min(math.ceil(len(template) / 1000) + len(variables), 10),
    }
