#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/html2blocks/hooks.py
"""Hook system for overriding the conversion tables.

Hooks let callers adjust the tag mapping and the allow-list policy without
mutating the converter's own tables. Before every conversion the converter
copies both tables and passes each copy through the hooks registered for its
hook point:

- ``"mapping"`` receives a :class:`~html2blocks.mapping.MappingTable`
- ``"allowed_tags"`` receives a :class:`~html2blocks.sanitizer.AllowListPolicy`

Each hook returns the (possibly replaced) table, which is handed to the next
hook in priority order.

Examples
--------
Map ``<aside>`` to a custom block for every conversion:

    >>> from html2blocks import BlockConverter, HookManager
    >>> manager = HookManager()
    >>>
    >>> def add_callout(table, context):
    ...     table.add("aside", "acme/callout")
    ...     return table
    >>>
    >>> manager.register_hook("mapping", add_callout)
    >>> converter = BlockConverter(hooks=manager)

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional

logger = logging.getLogger(__name__)

HookPoint = Literal["mapping", "allowed_tags"]

HOOK_POINTS: tuple[str, ...] = ("mapping", "allowed_tags")

# (table, HookContext) -> table
HookCallable = Callable[[Any, "HookContext"], Any]


@dataclass
class HookContext:
    """Context passed to hook functions.

    Parameters
    ----------
    converter : BlockConverter, optional
        The converter about to run
    shared : dict, default = empty dict
        Shared mutable dictionary for passing data between hooks

    """

    converter: Optional[Any] = None
    shared: dict[str, Any] = field(default_factory=dict)

    def get_shared(self, key: str, default: Any = None) -> Any:
        """Get a value from shared state."""
        return self.shared.get(key, default)

    def set_shared(self, key: str, value: Any) -> None:
        """Set a value in shared state."""
        self.shared[key] = value


class HookManager:
    """Registry of table hooks.

    Parameters
    ----------
    strict : bool, default = False
        If True, hook exceptions are re-raised and abort the conversion.
        If False, exceptions are logged and the remaining hooks still run.

    Notes
    -----
    HookManager instances are not thread-safe. Registration and execution
    share mutable state without synchronization; use one manager per
    converter when converting concurrently.

    """

    def __init__(self, strict: bool = False) -> None:
        """Initialize the hook manager."""
        self._hooks: dict[str, list[tuple[int, HookCallable]]] = {}
        self.strict = strict

    def register_hook(self, target: HookPoint, hook: HookCallable, priority: int = 100) -> None:
        """Register a hook for a hook point.

        Parameters
        ----------
        target : {"mapping", "allowed_tags"}
            Hook point
        hook : callable
            Hook function with signature ``(table, context) -> table``
        priority : int, default = 100
            Execution priority (lower runs first); equal priorities run in
            registration order

        Raises
        ------
        ValueError
            If ``target`` is not a known hook point

        """
        if target not in HOOK_POINTS:
            raise ValueError(f"Unknown hook point '{target}'. Expected one of: {', '.join(HOOK_POINTS)}")

        self._hooks.setdefault(target, []).append((priority, hook))
        logger.debug(f"Registered hook for '{target}' with priority {priority}")

    def unregister_hook(self, target: HookPoint, hook: HookCallable) -> bool:
        """Unregister a hook; return True if it was found and removed."""
        if target not in self._hooks:
            return False

        initial_len = len(self._hooks[target])
        self._hooks[target] = [(p, h) for p, h in self._hooks[target] if h != hook]

        removed = len(self._hooks[target]) < initial_len
        if removed:
            logger.debug(f"Unregistered hook from '{target}'")
        return removed

    def execute_hooks(self, target: HookPoint, obj: Any, context: HookContext) -> Any:
        """Execute all hooks for a hook point.

        Each hook receives the result of the previous one. A hook returning
        None leaves the table unchanged.

        Parameters
        ----------
        target : {"mapping", "allowed_tags"}
            Hook point
        obj : Any
            Table to filter
        context : HookContext
            Hook context

        Returns
        -------
        Any
            The filtered table

        Raises
        ------
        Exception
            Any exception from a hook if strict mode is enabled

        """
        if target not in self._hooks:
            return obj

        result = obj
        for priority, hook in sorted(self._hooks[target], key=lambda x: x[0]):
            try:
                filtered = hook(result, context)
            except Exception as e:
                logger.warning(f"Hook failed at '{target}' with priority {priority}: {e}", exc_info=True)
                if self.strict:
                    raise
                continue

            if filtered is None:
                logger.debug(f"Hook at '{target}' returned None; keeping the table unchanged")
                continue
            result = filtered

        return result

    def has_hooks(self, target: HookPoint) -> bool:
        """Check if any hooks are registered for a hook point."""
        return bool(self._hooks.get(target))

    def list_hooks(self) -> dict[str, list[tuple[int, HookCallable]]]:
        """Return a shallow copy of the registered hooks by hook point."""
        return {target: list(hooks) for target, hooks in self._hooks.items()}

    def clear(self) -> None:
        """Clear all registered hooks."""
        self._hooks.clear()
        logger.debug("Cleared all hooks")


__all__ = ["HOOK_POINTS", "HookCallable", "HookContext", "HookManager", "HookPoint"]
