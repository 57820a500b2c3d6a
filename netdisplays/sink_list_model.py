"""A list of sinks that follows what a provider discovers."""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

from netdisplays.signals import Signal

logger = logging.getLogger(__name__)


class Provider:
    """Source of sinks; announces them through its two signals.

    ``sink_added`` and ``sink_removed`` are emitted with the sink as
    their only argument.
    """

    def __init__(self) -> None:
        self.sink_added = Signal("sink-added")
        self.sink_removed = Signal("sink-removed")


class SinkListModel:
    """Ordered list of the sinks a provider has announced.

    Each change emits ``items_changed`` with the position, the number of
    items removed and the number of items added.
    """

    def __init__(self, provider: Optional[Provider] = None) -> None:
        self.items_changed = Signal("items-changed")
        self._sinks: list[Any] = []
        self._provider: Optional[Provider] = None
        self.provider = provider

    @property
    def provider(self) -> Optional[Provider]:
        """The provider that populates the list."""
        return self._provider

    @provider.setter
    def provider(self, provider: Optional[Provider]) -> None:
        if self._provider is not None:
            self._provider.sink_added.disconnect(self._on_sink_added)
            self._provider.sink_removed.disconnect(self._on_sink_removed)
            self._provider = None

        if provider is not None:
            self._provider = provider
            provider.sink_added.connect(self._on_sink_added)
            provider.sink_removed.connect(self._on_sink_removed)

    def _on_sink_added(self, sink: Any) -> None:
        if sink is None:
            logger.debug("NdSinkList: No sink to add")
            return
        logger.debug("NdSinkList: Adding a sink")
        position = len(self._sinks)
        self._sinks.append(sink)
        self.items_changed.emit(position, 0, 1)

    def _on_sink_removed(self, sink: Any) -> None:
        if sink is None:
            logger.debug("NdSinkList: No sink to remove")
            return
        logger.debug("NdSinkList: Removing a sink")
        try:
            position = self._sinks.index(sink)
        except ValueError:
            logger.warning("NdSinkList: Sink to remove is not in the list")
            return
        del self._sinks[position]
        self.items_changed.emit(position, 1, 0)

    def __len__(self) -> int:
        return len(self._sinks)

    def __getitem__(self, position: int) -> Any:
        return self._sinks[position]

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._sinks))