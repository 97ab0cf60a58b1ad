"""Capability interfaces for discovery sources.

A source either answers a one-shot request (``scan``) or collects events
over a bounded window (``scan_window``). The orchestrator dispatches on
which capability an adapter exposes.
"""

from typing import Protocol, runtime_checkable

from airscan.scanner.models import RawPayload, SourceType


@runtime_checkable
class PollingAdapter(Protocol):
    source_type: SourceType

    async def scan(self) -> list[RawPayload]:
        """Return the current set of visible emitters."""
        ...


@runtime_checkable
class WindowedAdapter(Protocol):
    source_type: SourceType

    async def scan_window(self, window: float) -> list[RawPayload]:
        """Collect discovery events for ``window`` seconds and return them."""
        ...


SourceAdapter = PollingAdapter | WindowedAdapter
