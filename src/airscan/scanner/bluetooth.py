"""Bluetooth LE discovery as a bounded, one-shot scan.

Advertisement discovery is an open-ended event stream. ``BluetoothAdapter``
turns it into a single result by holding exclusive control of the radio,
collecting into a private buffer for a fixed window, then stopping
discovery and removing its listener on every exit path.
"""

import asyncio
import enum
import logging
from collections.abc import Callable
from typing import Any, Protocol

from airscan.scanner.errors import AdapterError
from airscan.scanner.models import RawPayload, SourceType

logger = logging.getLogger(__name__)

DiscoveryListener = Callable[[RawPayload], None]


class DiscoveryRadio(Protocol):
    """The underlying radio: start/stop discovery and fan out events."""

    def add_listener(self, listener: DiscoveryListener) -> None: ...

    def remove_listener(self, listener: DiscoveryListener) -> None: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...


def advertisement_payload(device: Any, advertisement: Any) -> RawPayload:
    """Flatten a bleak (device, advertisement) pair into a raw payload."""
    name = getattr(advertisement, "local_name", None) or getattr(device, "name", None)
    # Prefer rssi from the advertisement, older bleak kept it on the device
    rssi = getattr(advertisement, "rssi", None)
    if rssi is None:
        rssi = getattr(device, "rssi", None)
    return {
        "name": name,
        "address": getattr(device, "address", None),
        "rssi": rssi,
        "tx_power": getattr(advertisement, "tx_power", None),
    }


class BleakRadio:
    """DiscoveryRadio backed by a single ``bleak.BleakScanner``."""

    def __init__(self, adapter: str | None = None) -> None:
        self.adapter = adapter
        self._listeners: list[DiscoveryListener] = []
        self._scanner = None
        self._running = False

    def add_listener(self, listener: DiscoveryListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: DiscoveryListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _on_detection(self, device, advertisement_data) -> None:  # type: ignore[no-untyped-def]
        payload = advertisement_payload(device, advertisement_data)
        # Snapshot: a listener may be removed while dispatching
        for listener in list(self._listeners):
            listener(payload)

    def _get_scanner(self):  # type: ignore[no-untyped-def]
        if self._scanner is None:
            from bleak import BleakScanner

            scanner_kwargs = {}
            if self.adapter:
                scanner_kwargs["adapter"] = self.adapter  # e.g., "hci1"
            self._scanner = BleakScanner(
                detection_callback=self._on_detection, **scanner_kwargs
            )
        return self._scanner

    async def start(self) -> None:
        logger.info("Starting Bluetooth discovery%s", f" on {self.adapter}" if self.adapter else "")
        await self._get_scanner().start()
        self._running = True

    async def stop(self) -> None:
        if self._scanner is None or not self._running:
            return
        logger.info("Stopping Bluetooth discovery")
        self._running = False
        await self._scanner.stop()


class WindowState(enum.StrEnum):
    idle = "idle"
    discovering = "discovering"
    draining = "draining"
    closed = "closed"


class DiscoveryWindow:
    """Private buffer for one scan window.

    Only events delivered while ``discovering`` are kept; anything that
    arrives once the window has elapsed is dropped, even if the listener
    is still registered.
    """

    def __init__(self) -> None:
        self.state = WindowState.idle
        self.events: list[RawPayload] = []
        self.dropped = 0

    def on_event(self, payload: RawPayload) -> None:
        if self.state is WindowState.discovering:
            self.events.append(payload)
        else:
            self.dropped += 1


class BluetoothAdapter:
    """Windowed Bluetooth scan with exclusive access to the radio."""

    source_type = SourceType.bluetooth

    def __init__(self, radio: DiscoveryRadio) -> None:
        self.radio = radio
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def scan_window(self, window: float) -> list[RawPayload]:
        if self._lock.locked():
            logger.info("Bluetooth radio busy, waiting for the current window to close")
        async with self._lock:
            return await self._collect(window)

    async def _collect(self, window: float) -> list[RawPayload]:
        buffer = DiscoveryWindow()
        self.radio.add_listener(buffer.on_event)
        try:
            buffer.state = WindowState.discovering
            try:
                await self.radio.start()
            except Exception as e:
                raise AdapterError(SourceType.bluetooth, e) from e
            logger.info("Bluetooth window open for %.1fs", window)
            await asyncio.sleep(window)
        finally:
            buffer.state = WindowState.draining
            try:
                await self.radio.stop()
            except Exception:
                logger.exception("Failed to stop Bluetooth discovery")
            finally:
                self.radio.remove_listener(buffer.on_event)
                buffer.state = WindowState.closed

        if buffer.dropped:
            logger.debug("Dropped %d Bluetooth event(s) outside the window", buffer.dropped)
        logger.info("Bluetooth window closed with %d event(s)", len(buffer.events))
        return list(buffer.events)
