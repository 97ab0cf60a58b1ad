"""Tests for application wiring."""

from airscan.config import Settings
from airscan.main import _create_adapters, _create_sink
from airscan.scanner.bluetooth import BleakRadio, BluetoothAdapter
from airscan.scanner.mobile import MockMobileAdapter
from airscan.scanner.models import SourceType
from airscan.scanner.wifi import WifiAdapter


class TestCreateAdapters:
    def test_default_sources(self):
        adapters = _create_adapters(Settings())
        assert isinstance(adapters[SourceType.wifi], WifiAdapter)
        assert isinstance(adapters[SourceType.bluetooth], BluetoothAdapter)
        assert isinstance(adapters[SourceType.mobile], MockMobileAdapter)

    def test_passes_hardware_settings(self):
        adapters = _create_adapters(
            Settings(wifi_interface="wlan1", wifi_rescan=False, bluetooth_adapter="hci1")
        )
        wifi = adapters[SourceType.wifi]
        assert wifi.interface == "wlan1"
        assert wifi.rescan is False
        radio = adapters[SourceType.bluetooth].radio
        assert isinstance(radio, BleakRadio)
        assert radio.adapter == "hci1"

    def test_mobile_disabled(self):
        assert SourceType.mobile not in _create_adapters(Settings(mobile_mode="none"))

    def test_unknown_mobile_mode_disables_source(self):
        assert SourceType.mobile not in _create_adapters(Settings(mobile_mode="modem"))


class TestCreateSink:
    def test_without_db(self, tmp_path):
        sink = _create_sink(Settings(persist_to_db=False, csv_log_path=tmp_path / "x.csv"))
        assert sink.engine is None
        assert sink.csv_log.path == tmp_path / "x.csv"

    def test_with_db(self, tmp_path):
        sink = _create_sink(Settings(csv_log_path=tmp_path / "x.csv"))
        assert sink.engine is not None


class TestLifespan:
    def test_startup_populates_state(self, client):
        from airscan.main import app

        assert set(app.state.orchestrator.adapters) == set(SourceType)
        assert app.state.sink is not None
