"""Mocked cellular source.

There is no modem integration; the adapter reports a fixed tower so the
rest of the pipeline can treat mobile like any other polling source.
"""

import logging

from airscan.scanner.models import RawPayload, SourceType

logger = logging.getLogger(__name__)

MOCK_TOWERS: tuple[RawPayload, ...] = (
    {
        "name": "Cell Tower",
        "address": "Tower ID 12345",
        "signal": -85,
        "frequency": "1800 MHz",
    },
)


class MockMobileAdapter:
    """Returns a constant list of cell towers."""

    source_type = SourceType.mobile

    def __init__(self, towers: tuple[RawPayload, ...] = MOCK_TOWERS) -> None:
        self.towers = towers

    async def scan(self) -> list[RawPayload]:
        logger.debug("Returning %d mocked cell tower(s)", len(self.towers))
        # Copies, so callers cannot mutate the fixture
        return [dict(tower) for tower in self.towers]
