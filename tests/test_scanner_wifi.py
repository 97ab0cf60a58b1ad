"""Tests for the NetworkManager WiFi adapter."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from airscan.scanner.errors import AdapterError
from airscan.scanner.models import SourceType
from airscan.scanner.wifi import (
    WifiAdapter,
    parse_nmcli_output,
    quality_to_dbm,
    split_terse_row,
)

NMCLI_OUTPUT = (
    "HomeNet:AA\\:BB\\:CC\\:DD\\:EE\\:FF:80:2412 MHz:1:WPA2\n"
    "Cafe\\: Free:11\\:22\\:33\\:44\\:55\\:66:30:5180 MHz:36:\n"
    "\n"
)


def _mock_process(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0):
    process = MagicMock()
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    process.returncode = returncode
    return process


class TestParseNmcliOutput:
    def test_parses_rows(self):
        networks = parse_nmcli_output(NMCLI_OUTPUT)
        assert len(networks) == 2
        first = networks[0]
        assert first["ssid"] == "HomeNet"
        assert first["bssid"] == "aa:bb:cc:dd:ee:ff"
        assert first["quality"] == 80
        assert first["signal_level"] == -60
        assert first["frequency"] == 2412
        assert first["channel"] == 1
        assert first["security"] == "WPA2"

    def test_unescapes_colons_in_ssid(self):
        networks = parse_nmcli_output(NMCLI_OUTPUT)
        assert networks[1]["ssid"] == "Cafe: Free"
        assert networks[1]["security"] == ""

    def test_ssid_ending_in_backslash(self):
        networks = parse_nmcli_output(
            "Lab\\\\:AA\\:BB\\:CC\\:DD\\:EE\\:FF:70:2437 MHz:6:WPA2\n"
        )
        assert [n["ssid"] for n in networks] == ["Lab\\"]
        assert networks[0]["bssid"] == "aa:bb:cc:dd:ee:ff"
        assert networks[0]["frequency"] == 2437

    def test_split_terse_row_escapes(self):
        assert split_terse_row("a\\\\b\\:c:d:") == ["a\\b:c", "d", ""]

    def test_skips_malformed_rows(self):
        assert parse_nmcli_output("only:three:fields\n") == []

    def test_missing_signal(self):
        networks = parse_nmcli_output("Net:AA\\:BB::2412 MHz:1:\n")
        assert networks[0]["quality"] is None
        assert networks[0]["signal_level"] is None

    def test_quality_to_dbm(self):
        assert quality_to_dbm(100) == -50
        assert quality_to_dbm(0) == -100


class TestWifiAdapterCommand:
    def test_default_command(self):
        cmd = WifiAdapter()._command()
        assert cmd[:3] == ["nmcli", "-t", "-f"]
        assert "ifname" not in cmd
        assert cmd[-2:] == ["--rescan", "yes"]

    def test_interface_and_no_rescan(self):
        cmd = WifiAdapter(interface="wlan1", rescan=False)._command()
        assert cmd[cmd.index("ifname") + 1] == "wlan1"
        assert cmd[-2:] == ["--rescan", "no"]

    def test_rejects_unsafe_interface(self):
        with pytest.raises(ValueError):
            WifiAdapter(interface="wlan0; reboot")


class TestWifiAdapterScan:
    @pytest.mark.asyncio
    async def test_success(self):
        process = _mock_process(stdout=NMCLI_OUTPUT.encode())
        with patch(
            "airscan.scanner.wifi.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ) as mock_exec:
            networks = await WifiAdapter().scan()

        assert [n["ssid"] for n in networks] == ["HomeNet", "Cafe: Free"]
        assert mock_exec.call_args.args[0] == "nmcli"

    @pytest.mark.asyncio
    async def test_nonzero_exit_raises_adapter_error(self):
        process = _mock_process(stderr=b"Error: NetworkManager is not running.", returncode=8)
        with patch(
            "airscan.scanner.wifi.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            with pytest.raises(AdapterError) as exc_info:
                await WifiAdapter().scan()

        assert exc_info.value.source == SourceType.wifi
        assert "not running" in str(exc_info.value.cause)

    @pytest.mark.asyncio
    async def test_missing_nmcli_raises_adapter_error(self):
        with patch(
            "airscan.scanner.wifi.asyncio.create_subprocess_exec",
            AsyncMock(side_effect=FileNotFoundError("nmcli")),
        ):
            with pytest.raises(AdapterError) as exc_info:
                await WifiAdapter().scan()

        assert isinstance(exc_info.value.cause, FileNotFoundError)
