# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Unit tests for OnkyoReceiverClientConfig."""

import json
from pathlib import Path

import pytest

from onkyo_receiver import (
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    MAX_RESPONSE_READS,
    OnkyoReceiverError,
    OnkyoReceiverClientConfig,
)


class TestDefaults:
    """Test configuration defaults and environment variables."""

    def test_defaults(self) -> None:
        config = OnkyoReceiverClientConfig()
        assert config.default_host is None
        assert config.default_port == DEFAULT_PORT == 60128
        assert config.timeout_secs == DEFAULT_TIMEOUT
        assert config.max_response_reads == MAX_RESPONSE_READS

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ONKYO_RECEIVER_HOST", "192.168.1.20")
        monkeypatch.setenv("ONKYO_RECEIVER_PORT", "60200")
        monkeypatch.setenv("ONKYO_RECEIVER_TIMEOUT", "1.5")
        config = OnkyoReceiverClientConfig()
        assert config.default_host == "192.168.1.20"
        assert config.default_port == 60200
        assert config.timeout_secs == 1.5

    def test_arguments_override_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ONKYO_RECEIVER_HOST", "192.168.1.20")
        monkeypatch.setenv("ONKYO_RECEIVER_PORT", "60200")
        config = OnkyoReceiverClientConfig("10.0.0.5", default_port=60300, timeout_secs=0.25)
        assert config.default_host == "10.0.0.5"
        assert config.default_port == 60300
        assert config.timeout_secs == 0.25

    def test_invalid_port_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ONKYO_RECEIVER_PORT", "eiscp")
        with pytest.raises(OnkyoReceiverError):
            OnkyoReceiverClientConfig()

    def test_invalid_timeout_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ONKYO_RECEIVER_TIMEOUT", "soon")
        with pytest.raises(OnkyoReceiverError):
            OnkyoReceiverClientConfig()


class TestValidation:
    """Test range checks."""

    def test_port_out_of_range(self) -> None:
        with pytest.raises(OnkyoReceiverError):
            OnkyoReceiverClientConfig(default_port=70000)

    def test_nonpositive_timeout(self) -> None:
        with pytest.raises(OnkyoReceiverError):
            OnkyoReceiverClientConfig(timeout_secs=0)

    def test_zero_reads(self) -> None:
        with pytest.raises(OnkyoReceiverError):
            OnkyoReceiverClientConfig(max_response_reads=0)


class TestConfigFile:
    """Test JSON serialization and config files."""

    def test_json_round_trip(self) -> None:
        config = OnkyoReceiverClientConfig("192.168.1.20", default_port=60200, timeout_secs=2.0)
        copy = OnkyoReceiverClientConfig.from_json(config.to_json(), use_config_file=False)
        assert copy.to_jsonable() == config.to_jsonable()

    def test_config_file_from_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        config_file = tmp_path / "onkyo.json"
        config_file.write_text(json.dumps(dict(default_host="192.168.1.30", timeout_secs=5, max_response_reads=8)))
        monkeypatch.setenv("ONKYO_RECEIVER_CONFIG_FILE", str(config_file))
        config = OnkyoReceiverClientConfig()
        assert config.default_host == "192.168.1.30"
        assert config.timeout_secs == 5.0
        assert config.max_response_reads == 8
        assert config.default_port == DEFAULT_PORT

    def test_environment_overrides_config_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        config_file = tmp_path / "onkyo.json"
        config_file.write_text(json.dumps(dict(default_host="192.168.1.30")))
        monkeypatch.setenv("ONKYO_RECEIVER_CONFIG_FILE", str(config_file))
        monkeypatch.setenv("ONKYO_RECEIVER_HOST", "192.168.1.40")
        assert OnkyoReceiverClientConfig().default_host == "192.168.1.40"

    def test_config_file_ignored_when_disabled(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        config_file = tmp_path / "onkyo.json"
        config_file.write_text(json.dumps(dict(default_host="192.168.1.30")))
        monkeypatch.setenv("ONKYO_RECEIVER_CONFIG_FILE", str(config_file))
        assert OnkyoReceiverClientConfig(use_config_file=False).default_host is None

    def test_from_config_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "onkyo.json"
        config_file.write_text(json.dumps(dict(default_port="60400")))
        config = OnkyoReceiverClientConfig.from_config_file(str(config_file))
        assert config.default_port == 60400

    def test_base_config_is_copied(self) -> None:
        base = OnkyoReceiverClientConfig("192.168.1.20", timeout_secs=2.0)
        derived = OnkyoReceiverClientConfig(base_config=base, timeout_secs=0.5)
        assert derived.default_host == "192.168.1.20"
        assert derived.timeout_secs == 0.5
        assert base.timeout_secs == 2.0
