"""WiFi access point scan via NetworkManager.

Runs ``nmcli`` in terse mode and converts each row into a payload shaped
like the common Node/Python WiFi libraries report it (``ssid``, ``bssid``,
``signal_level``, ``frequency``...), so the normalizer sees one format.
"""

import asyncio
import logging
import re

from airscan.scanner.errors import AdapterError
from airscan.scanner.models import RawPayload, SourceType

logger = logging.getLogger(__name__)

_FIELDS = ("SSID", "BSSID", "SIGNAL", "FREQ", "CHAN", "SECURITY")

_VALID_INTERFACE_RE = re.compile(r"^[a-zA-Z0-9_-]+$")


def _validate_interface_name(name: str) -> str:
    if not name or len(name) > 15 or not _VALID_INTERFACE_RE.match(name):
        raise ValueError(f"Invalid interface name: {name!r}")
    return name


def split_terse_row(line: str) -> list[str]:
    """Split one ``nmcli -t`` row into unescaped fields.

    A bare ':' separates fields; a backslash escapes the next character
    ('\\:' for a literal colon, '\\\\' for a literal backslash).
    """
    fields: list[str] = []
    current: list[str] = []
    escaped = False
    for ch in line:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == ":":
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
    fields.append("".join(current))
    return fields


def _to_int(value: str) -> int | None:
    match = re.match(r"\s*(-?\d+)", value)
    return int(match.group(1)) if match else None


def quality_to_dbm(quality: int) -> float:
    """Map NetworkManager's 0-100 signal quality onto an approximate dBm level."""
    return quality / 2 - 100


def parse_nmcli_output(output: str) -> list[RawPayload]:
    """Parse ``nmcli -t -f SSID,BSSID,SIGNAL,FREQ,CHAN,SECURITY`` rows."""
    networks: list[RawPayload] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = split_terse_row(line)
        if len(parts) != len(_FIELDS):
            logger.debug("Skipping malformed nmcli row: %r", line)
            continue
        ssid, bssid, signal, freq, chan, security = parts

        quality = _to_int(signal)
        networks.append(
            {
                "ssid": ssid,
                "bssid": bssid.lower(),
                "mac": bssid.lower(),
                "quality": quality,
                "signal_level": quality_to_dbm(quality) if quality is not None else None,
                "frequency": _to_int(freq),
                "channel": _to_int(chan),
                "security": security,
            }
        )
    return networks


class WifiAdapter:
    """One-shot WiFi scan through ``nmcli``."""

    source_type = SourceType.wifi

    def __init__(self, interface: str | None = None, rescan: bool = True) -> None:
        self.interface = _validate_interface_name(interface) if interface else None
        self.rescan = rescan

    def _command(self) -> list[str]:
        cmd = ["nmcli", "-t", "-f", ",".join(_FIELDS), "device", "wifi", "list"]
        if self.interface:
            cmd += ["ifname", self.interface]
        cmd += ["--rescan", "yes" if self.rescan else "no"]
        return cmd

    async def scan(self) -> list[RawPayload]:
        cmd = self._command()
        logger.info("Scanning WiFi networks%s", f" on {self.interface}" if self.interface else "")
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await process.communicate()
        except OSError as e:
            raise AdapterError(SourceType.wifi, e) from e

        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            cause = RuntimeError(message or f"nmcli exited with status {process.returncode}")
            raise AdapterError(SourceType.wifi, cause)

        networks = parse_nmcli_output(stdout.decode("utf-8", errors="replace"))
        logger.info("WiFi scan found %d network(s)", len(networks))
        return networks
