"""Sequential event channel.

Handlers registered for an event name run one after another, in
registration order. A handler may be a plain callable or return an
awaitable; the next handler starts only after the current one settles.
The first failing handler aborts the emission and its exception reaches
the caller of :meth:`Notifier.emit` unchanged.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable
from typing import Any

from pyattrstore.exceptions import InvalidHandlerError

_logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


def _split_names(names: str | Iterable[str]) -> list[str]:
    """Expand ``"ev1 ev2"`` (or an iterable of such strings) into names."""
    if isinstance(names, str):
        return [name for name in names.split(" ") if name]
    if not isinstance(names, Iterable):
        return []
    result: list[str] = []
    for item in names:
        result.extend(_split_names(item))
    return result


class _OnceHandler:
    """Removes itself from *notifier* before its first and only call."""

    def __init__(self, notifier: Notifier, event: str, listener: Handler) -> None:
        self.notifier = notifier
        self.event = event
        self.listener = listener
        self.fired = False

    def __call__(self, *args: Any) -> Any:
        # Overlapping emissions may both hold this wrapper in their snapshot.
        if self.fired:
            return None
        self.fired = True
        self.notifier._remove(self.event, self)  # noqa: SLF001
        return self.listener(*args)

    def __repr__(self) -> str:
        return f"<once {self.listener!r}>"


def _unwrap(handler: Handler) -> Handler:
    return handler.listener if isinstance(handler, _OnceHandler) else handler


class Notifier:
    """Event name → ordered handler list, with sequential async emission."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def _add(self, names: str | Iterable[str], handler: Handler, *, once: bool) -> None:
        event_names = _split_names(names)
        if not callable(handler):
            raise InvalidHandlerError(
                f"Handler must be callable, got {type(handler).__name__}",
                event=" ".join(event_names),
            )
        for name in event_names:
            entry = _OnceHandler(self, name, handler) if once else handler
            self._handlers.setdefault(name, []).append(entry)

    def _remove(self, name: str, entry: Handler) -> None:
        handlers = self._handlers.get(name)
        if not handlers:
            return
        for index, candidate in enumerate(handlers):
            if candidate is entry:
                del handlers[index]
                break
        if not handlers:
            del self._handlers[name]

    def on(self, names: str | Iterable[str], handler: Handler) -> Notifier:
        """Register *handler* under every name in *names*."""
        self._add(names, handler, once=False)
        return self

    def once(self, names: str | Iterable[str], handler: Handler) -> Notifier:
        """Register *handler* to run at most once per name."""
        self._add(names, handler, once=True)
        return self

    def off(self, name: str | None = None, handler: Handler | None = None) -> Notifier:
        """Remove one handler, all handlers of *name*, or everything.

        A handler registered several times loses its most recent
        registration only.
        """
        if name is None:
            self._handlers.clear()
        elif handler is None:
            self._handlers.pop(name, None)
        else:
            handlers = self._handlers.get(name, [])
            for index in range(len(handlers) - 1, -1, -1):
                if _unwrap(handlers[index]) is handler:
                    del handlers[index]
                    break
            if not handlers:
                self._handlers.pop(name, None)
        return self

    def listeners(self, name: str) -> list[Handler]:
        """Return a copy of the handlers registered for *name*."""
        return [_unwrap(entry) for entry in self._handlers.get(name, [])]

    def event_names(self) -> list[str]:
        return list(self._handlers)

    async def emit(self, name: str, *args: Any) -> None:
        """Run every handler of *name* in order, awaiting each one.

        The handler list is copied before the first call, so handlers that
        register or remove handlers only affect later emissions.
        """
        handlers = list(self._handlers.get(name, []))
        if not handlers:
            return

        _logger.debug("Emitting event=%s to %d handler(s)", name, len(handlers))
        for handler in handlers:
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                _logger.debug("Handler %r failed for event=%s; aborting emission", _unwrap(handler), name)
                raise
