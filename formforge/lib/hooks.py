"""Action/filter hooks around form and submission lifecycle events.

Actions run callbacks for side effects; filters pass a value through each
callback and return the result. Callbacks may be sync or async and run in
priority order (lower first).

    from formforge.lib.hooks import action, filter

    @action("after_submission_create")
    async def notify(submission, form):
        ...

    @filter("submission_data")
    def strip_whitespace(data, form):
        return {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

T = TypeVar("T")

# Actions
BEFORE_FORM_SAVE = "before_form_save"
AFTER_FORM_SAVE = "after_form_save"
BEFORE_FORM_DELETE = "before_form_delete"
AFTER_FORM_DELETE = "after_form_delete"
AFTER_SUBMISSION_CREATE = "after_submission_create"

# Filters
SUBMISSION_DATA = "submission_data"


@dataclass(order=True)
class HookHandler:
    priority: int
    callback: Callable = field(compare=False)

    async def call(self, *args: Any, **kwargs: Any) -> Any:
        result = self.callback(*args, **kwargs)
        if asyncio.iscoroutine(result):
            return await result
        return result


class HookRegistry:
    """Holds registered actions and filters by hook name."""

    def __init__(self) -> None:
        self._actions: dict[str, list[HookHandler]] = defaultdict(list)
        self._filters: dict[str, list[HookHandler]] = defaultdict(list)

    @staticmethod
    def _register(table: dict[str, list[HookHandler]], hook_name: str, callback: Callable, priority: int) -> None:
        table[hook_name].append(HookHandler(priority=priority, callback=callback))
        table[hook_name].sort()

    @staticmethod
    def _unregister(table: dict[str, list[HookHandler]], hook_name: str, callback: Callable) -> bool:
        handlers = table.get(hook_name, [])
        for i, handler in enumerate(handlers):
            if handler.callback is callback:
                handlers.pop(i)
                return True
        return False

    def add_action(self, hook_name: str, callback: Callable[..., Any], priority: int = 10) -> None:
        self._register(self._actions, hook_name, callback, priority)

    def add_filter(self, hook_name: str, callback: Callable[..., Any], priority: int = 10) -> None:
        self._register(self._filters, hook_name, callback, priority)

    def remove_action(self, hook_name: str, callback: Callable[..., Any]) -> bool:
        return self._unregister(self._actions, hook_name, callback)

    def remove_filter(self, hook_name: str, callback: Callable[..., Any]) -> bool:
        return self._unregister(self._filters, hook_name, callback)

    def has_action(self, hook_name: str) -> bool:
        return bool(self._actions.get(hook_name))

    def has_filter(self, hook_name: str) -> bool:
        return bool(self._filters.get(hook_name))

    async def do_action(self, hook_name: str, *args: Any, **kwargs: Any) -> None:
        """Run every action registered for ``hook_name``."""
        from formforge.lib.observability import span

        with span(f"hook.action:{hook_name}", hook_name=hook_name):
            for handler in list(self._actions.get(hook_name, [])):
                await handler.call(*args, **kwargs)

    async def apply_filters(self, hook_name: str, value: T, *args: Any, **kwargs: Any) -> T:
        """Thread ``value`` through every filter registered for ``hook_name``."""
        from formforge.lib.observability import span

        with span(f"hook.filter:{hook_name}", hook_name=hook_name):
            for handler in list(self._filters.get(hook_name, [])):
                value = await handler.call(value, *args, **kwargs)
            return value

    def clear(self) -> None:
        self._actions.clear()
        self._filters.clear()


hooks = HookRegistry()


def action(hook_name: str, priority: int = 10) -> Callable[[Callable], Callable]:
    """Register the decorated function as an action on the global registry."""

    def decorator(func: Callable) -> Callable:
        hooks.add_action(hook_name, func, priority)
        return func

    return decorator


def filter(hook_name: str, priority: int = 10) -> Callable[[Callable], Callable]:
    """Register the decorated function as a filter on the global registry."""

    def decorator(func: Callable) -> Callable:
        hooks.add_filter(hook_name, func, priority)
        return func

    return decorator
