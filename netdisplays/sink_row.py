"""A list row that shows one sink."""

from __future__ import annotations

from typing import Any, Optional

from netdisplays.signals import Signal


class SinkRow:
    """Row representing a sink; its title follows the sink's display name.

    If the sink has a ``notify`` signal, the title is refreshed whenever
    that signal is emitted.
    """

    def __init__(self, sink: Any) -> None:
        if sink is None:
            raise ValueError("a sink row needs a sink")
        self._sink: Optional[Any] = sink
        self.activatable = True
        self.title: Optional[str] = None

        notify = getattr(sink, "notify", None)
        self._notify: Optional[Signal] = notify if isinstance(notify, Signal) else None
        if self._notify is not None:
            self._notify.connect(self._sync)
        self._sync()

    @property
    def sink(self) -> Optional[Any]:
        """The sink this row represents, or None once the row is closed."""
        return self._sink

    def _sync(self, *_args: Any) -> None:
        if self._sink is not None:
            self.title = getattr(self._sink, "display_name", None)

    def close(self) -> None:
        """Stop following the sink and release it."""
        if self._notify is not None and self._sync in self._notify:
            self._notify.disconnect(self._sync)
        self._notify = None
        self._sink = None