"""A small signal object for notifying connected handlers."""

from __future__ import annotations

from typing import Any, Callable


class Signal:
    """A list of handlers that are called, in connection order, on emit."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._handlers: list[Callable[..., Any]] = []

    def connect(self, callback: Callable[..., Any]) -> Callable[..., Any]:
        """Connect ``callback`` and return it, so this works as a decorator."""
        if not callable(callback):
            raise TypeError("signal handlers must be callable")
        self._handlers.append(callback)
        return callback

    def disconnect(self, callback: Callable[..., Any]) -> None:
        """Disconnect a handler; raise ValueError if it is not connected."""
        try:
            self._handlers.remove(callback)
        except ValueError:
            raise ValueError(
                f"handler is not connected to signal {self.name!r}"
            ) from None

    def emit(self, *args: Any) -> list[Any]:
        """Call every connected handler with ``args`` and return their results."""
        return [handler(*args) for handler in list(self._handlers)]

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, callback: object) -> bool:
        return callback in self._handlers

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, handlers={len(self._handlers)})"