"""
Placeholder substitution for connection and table name templates.

``bind("{prefix}_{id}_migrations", {"prefix": "acme", "id": 7})`` gives
``"acme_7_migrations"``. A placeholder whose path is missing from the
attribute map raises ``MissingTemplatePathError``; the binder never returns a
partially substituted name, since a wrong table or connection name would
route a tenant's migrations to the wrong place.
"""

import re
from typing import Any, Mapping, Optional

from ..exceptions import MissingTemplatePathError

PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


def is_template(value: Optional[str]) -> bool:
    """Whether ``value`` contains any brace at all."""
    return value is not None and ("{" in value or "}" in value)


def bind(template: Optional[str], attributes: Mapping[str, Any]) -> Optional[str]:
    """
    Substitute every ``{dotted.path}`` placeholder in ``template``.

    Args:
        template: Template string, or None
        attributes: Flat map of dotted keys to values

    Returns:
        The bound string; ``template`` itself when it is None or brace-free

    Raises:
        MissingTemplatePathError: If a placeholder path is not in ``attributes``
    """
    if not is_template(template):
        return template

    def substitute(match: "re.Match[str]") -> str:
        path = match.group(1).strip()
        if path not in attributes:
            raise MissingTemplatePathError(template, path)
        value = attributes[path]
        return "" if value is None else str(value)

    return PLACEHOLDER.sub(substitute, template)
