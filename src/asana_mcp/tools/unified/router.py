"""Action routing for multi-variant tools.

Each unified tool (``asana_get``, ``asana_create``, ...) selects one of many
handlers by a string such as a resource type. ``ActionRouter`` owns that
lookup, including aliases, so tool modules only declare their handlers.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from asana_mcp.core.errors.execution import ActionRouterError

ActionHandler = Callable[..., Union[dict, Awaitable[dict]]]


@dataclass(frozen=True)
class ActionDefinition:
    """A named handler plus the alternative names that reach it."""

    name: str
    handler: ActionHandler
    summary: Optional[str] = None
    aliases: Sequence[str] = ()


class ActionRouter:
    """Resolve an action name (case-insensitive, aliases allowed) to its handler."""

    def __init__(self, *, tool_name: str, actions: Sequence[ActionDefinition]) -> None:
        self.tool_name = tool_name
        self._definitions: Dict[str, ActionDefinition] = {}
        self._lookup: Dict[str, ActionDefinition] = {}

        for definition in actions:
            if definition.name in self._definitions:
                raise ValueError(f"Duplicate action '{definition.name}' for {tool_name}")
            self._definitions[definition.name] = definition
            for key in (definition.name, *definition.aliases):
                normalized = key.lower()
                if normalized in self._lookup:
                    raise ValueError(f"Action name '{key}' registered twice for {tool_name}")
                self._lookup[normalized] = definition

    def allowed_actions(self) -> List[str]:
        """Canonical action names in registration order."""
        return list(self._definitions)

    def has_action(self, action: Optional[str]) -> bool:
        return bool(action) and action.lower() in self._lookup  # type: ignore[union-attr]

    def describe(self) -> Dict[str, Optional[str]]:
        return {name: definition.summary for name, definition in self._definitions.items()}

    def resolve(self, action: Optional[str]) -> ActionDefinition:
        """Return the definition for *action*.

        Raises:
            ActionRouterError: If *action* is empty or not registered.
        """
        definition = self._lookup.get((action or "").lower())
        if definition is None:
            raise ActionRouterError(
                f"Unsupported action '{action}' for {self.tool_name}",
                allowed_actions=self.allowed_actions(),
            )
        return definition

    async def dispatch(self, action: Optional[str], **kwargs: Any) -> dict:
        """Invoke the handler for *action* with ``kwargs``; awaits async handlers."""
        definition = self.resolve(action)
        result = definition.handler(**kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result


__all__ = [
    "ActionDefinition",
    "ActionHandler",
    "ActionRouter",
]
