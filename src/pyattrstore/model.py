"""Attribute container with dirty tracking.

:class:`Model` keeps two dicts: the current attributes and a snapshot of
their last-synced state. An attribute is *dirty* when its current value
differs from the snapshot. Subclasses describe records by overriding the
class-level ``defaults`` and ``id_attribute`` and the :meth:`Model.parse`
and :meth:`Model.register_events` hooks::

    class User(Model):
        defaults = {"role": "member"}

        def register_events(self) -> None:
            self.on("saved", self._mark_clean)

Unset attributes keep their key and hold ``None``.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any, ClassVar, Self

from pyattrstore._redact import redact_attributes
from pyattrstore.changes import AttributeChange
from pyattrstore.events import Handler, Notifier

_logger = logging.getLogger(__name__)


def _flatten_names(names: Any) -> list[str]:
    """Normalize a name, an iterable of names, or nested iterables to a list."""
    if names is None:
        return []
    if isinstance(names, str):
        return [names] if names else []
    if isinstance(names, Iterable) and not isinstance(names, Mapping):
        result: list[str] = []
        for item in names:
            result.extend(_flatten_names(item))
        return result
    return []


def _selector(args: tuple[Any, ...]) -> Callable[[Any, str], bool]:
    """Build a ``(value, name)`` predicate from names or a single callable."""
    if len(args) == 1 and callable(args[0]) and not isinstance(args[0], str):
        predicate: Callable[[Any, str], bool] = args[0]
        return predicate
    names = set(_flatten_names(args))
    return lambda _value, name: name in names


class Model:
    """In-memory record with a change-tracked attribute bag.

    Parameters
    ----------
    data : Mapping or None
        Initial attributes.
    exists : bool
        When ``True`` the data is treated as already persisted: it is merged
        with :meth:`set_data` and snapshotted, so the new model is clean.
        Otherwise it goes through :meth:`fill` and starts out dirty.
    """

    id_attribute: ClassVar[str] = "id"
    """Name of the attribute holding the record identity."""

    defaults: ClassVar[Mapping[str, Any]] = {}
    """Attributes merged into every new instance before the initial data.

    Subclasses may instead define a ``defaults`` method returning a mapping.
    The result is deep-copied per instance.
    """

    def __init__(self, data: Mapping[str, Any] | None = None, *, exists: bool = False) -> None:
        self._data: dict[str, Any] = {}
        self._original: dict[str, Any] = {}

        self._events = Notifier()
        self.register_events()

        self._data.update(self._resolve_defaults())

        if exists:
            self.set_data(data or {})
        else:
            self.fill(data)

    @classmethod
    def make(cls, data: Mapping[str, Any] | None = None, exists: bool = False) -> Self:
        """Construct a model; same as calling the class."""
        return cls(data, exists=exists)

    def _resolve_defaults(self) -> dict[str, Any]:
        defaults = self.defaults
        if callable(defaults):
            defaults = defaults()
        if not isinstance(defaults, Mapping):
            return {}
        return copy.deepcopy(dict(defaults))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def parse(self, data: Mapping[str, Any]) -> Mapping[str, Any]:
        """Transform incoming data before :meth:`fill` assigns it."""
        return data

    def register_events(self) -> None:
        """Override to attach the model's event handlers."""

    # ------------------------------------------------------------------
    # Attribute access
    # ------------------------------------------------------------------

    def fill(self, data: Mapping[str, Any] | None) -> Self:
        """Assign every attribute of ``parse(data)`` through :meth:`set`."""
        if not isinstance(data, Mapping):
            return self
        parsed = self.parse(data)
        if not isinstance(parsed, Mapping):
            return self
        for name, value in parsed.items():
            self.set(name, value)
        return self

    def set(self, name: str | Mapping[str, Any], value: Any = None) -> Self:
        """Set one attribute, or fill from a mapping passed as *name*."""
        if isinstance(name, Mapping):
            return self.fill(name)
        if name:
            self._data[name] = value
        return self

    def get(self, name: str | None = None, default: Any = None) -> Any:
        """Return an attribute, or a copy of all attributes when *name* is omitted."""
        if not name:
            return dict(self._data)
        value = self._data.get(name)
        return default if value is None else value

    def set_id(self, value: Any) -> Self:
        return self.set(self.id_attribute, value)

    def get_id(self, default: Any = None) -> Any:
        return self.get(self.id_attribute, default)

    def unset(self, names: str | Iterable[str] | None, sync: bool = False) -> Self:
        """Set one or many attributes to ``None``.

        With ``sync=True`` the snapshot of those attributes is updated too,
        so they are not reported as dirty.
        """
        attr_names = _flatten_names(names)
        for name in attr_names:
            self._data[name] = None
        if sync and attr_names:
            self.sync_original(attr_names)
        return self

    def clear(self, sync: bool = False) -> Self:
        """Unset every attribute."""
        return self.unset(self.keys(), sync)

    def set_data(self, data: Mapping[str, Any] | None, sync: bool = True) -> Self:
        """Merge raw data, bypassing :meth:`parse` and :meth:`set`.

        Meant for data known to reflect persisted state; by default the
        whole model is snapshotted afterwards.
        """
        if isinstance(data, Mapping):
            _logger.debug("Merging raw data into %s: %s", type(self).__name__, redact_attributes(data))
            self._data.update(data)
        if sync:
            self.sync_original()
        return self

    def get_data(self) -> dict[str, Any]:
        return dict(self._data)

    # ------------------------------------------------------------------
    # Snapshot and dirty tracking
    # ------------------------------------------------------------------

    def get_original(self, name: str | None = None, default: Any = None) -> Any:
        """Return a snapshot value, or a copy of the whole snapshot."""
        if not name:
            return dict(self._original)
        value = self._original.get(name)
        return default if value is None else value

    def sync_original(self, names: str | Iterable[str] | None = None) -> Self:
        """Snapshot all attributes, or only *names*.

        The snapshot is a top-level copy: rebinding an attribute never
        touches it, but nested values are shared with the current data.
        """
        attr_names = _flatten_names(names)
        if not attr_names:
            self._original = dict(self._data)
        else:
            for name in attr_names:
                if name in self._data:
                    self._original[name] = self._data[name]
        return self

    def get_dirty(self) -> dict[str, Any]:
        """Return the attributes whose value differs from the snapshot."""
        return self.pick(lambda value, name: value != self._original.get(name))

    def is_dirty(self, name: str | None = None) -> bool:
        dirty = self.get_dirty()
        return name in dirty if name else bool(dirty)

    def get_changes(self) -> list[AttributeChange]:
        """Describe every dirty attribute with its current and snapshot value."""
        return [
            AttributeChange(name=name, value=value, original=self._original.get(name))
            for name, value in self.get_dirty().items()
        ]

    def to_json(self) -> dict[str, Any]:
        """Return every attribute that is not ``None``, ready for a JSON encoder."""
        payload: dict[str, Any] = {}
        for name in self._data:
            value = self.get(name)
            if value is not None:
                payload[name] = value
        return payload

    # ------------------------------------------------------------------
    # Mapping projections
    # ------------------------------------------------------------------

    def keys(self) -> list[str]:
        return list(self._data)

    def values(self) -> list[Any]:
        return list(self._data.values())

    def pairs(self) -> list[tuple[str, Any]]:
        return list(self._data.items())

    def invert(self) -> dict[Any, str]:
        """Swap names and values; ``None`` and unhashable values are skipped."""
        inverted: dict[Any, str] = {}
        for name, value in self._data.items():
            if value is None:
                continue
            try:
                inverted[value] = name
            except TypeError:
                continue
        return inverted

    def pick(self, *names: Any) -> dict[str, Any]:
        """Return a copy with only the given names, or the items matching a predicate."""
        selected = _selector(names)
        return {name: value for name, value in self._data.items() if selected(value, name)}

    def omit(self, *names: Any) -> dict[str, Any]:
        """Return a copy without the given names, or without items matching a predicate."""
        selected = _selector(names)
        return {name: value for name, value in self._data.items() if not selected(value, name)}

    def is_empty(self) -> bool:
        return not self._data

    def has(self, name: str) -> bool:
        return name in self._data

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    @property
    def events(self) -> Notifier:
        """The notifier owned by this model."""
        return self._events

    def on(self, names: str | Iterable[str], handler: Handler) -> Self:
        self._events.on(names, handler)
        return self

    def once(self, names: str | Iterable[str], handler: Handler) -> Self:
        self._events.once(names, handler)
        return self

    def off(self, name: str | None = None, handler: Handler | None = None) -> Self:
        self._events.off(name, handler)
        return self

    async def emit(self, name: str, *args: Any) -> None:
        """Run the handlers of *name* in order; see :meth:`Notifier.emit`."""
        await self._events.emit(name, *args)
