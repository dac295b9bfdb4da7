# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for the configuration system."""

from dataclasses import dataclass
from pathlib import Path

import pytest
from pydantic import BaseModel, Field

from apijob.core.config import Config, config_properties
from apijob.kernel.exceptions import ConfigurationException


class TestConfig:
    def test_load_from_dict(self):
        config = Config({"apijob": {"job": {"timeout": 30, "base-url": "https://hs.example.org"}}})
        assert config.get("apijob.job.timeout") == 30
        assert config.get("apijob.job.base-url") == "https://hs.example.org"

    def test_get_with_default(self):
        config = Config({})
        assert config.get("missing.key", "default") == "default"

    def test_get_through_non_dict_returns_default(self):
        config = Config({"apijob": {"job": 5}})
        assert config.get("apijob.job.timeout", 1) == 1

    def test_load_from_yaml_file(self, tmp_path: Path):
        config_file = tmp_path / "apijob.yaml"
        config_file.write_text("apijob:\n  job:\n    timeout: 45\n")
        config = Config.from_file(config_file)
        assert config.get("apijob.job.timeout") == 45
        assert str(config_file) in config.loaded_sources

    def test_load_from_toml_file(self, tmp_path: Path):
        config_file = tmp_path / "apijob.toml"
        config_file.write_text("[apijob.job]\ntimeout = 12\n")
        config = Config.from_file(config_file)
        assert config.get("apijob.job.timeout") == 12

    def test_missing_file_keeps_defaults(self, tmp_path: Path):
        config = Config.from_file(tmp_path / "absent.yaml")
        assert config.get("apijob.job.timeout") == 120
        assert config.loaded_sources == ["apijob-defaults.yaml (library defaults)"]

    def test_file_overrides_defaults(self, tmp_path: Path):
        config_file = tmp_path / "apijob.yaml"
        config_file.write_text("apijob:\n  job:\n    timeout: 10\n")
        config = Config.from_file(config_file)
        assert config.get("apijob.job.timeout") == 10
        assert config.get("apijob.job.user-agent") == "apijob"

    def test_load_without_defaults(self, tmp_path: Path):
        config_file = tmp_path / "apijob.yaml"
        config_file.write_text("apijob:\n  job:\n    timeout: 10\n")
        config = Config.from_file(config_file, load_defaults=False)
        assert config.get("apijob.logging.format") is None

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("APIJOB_JOB_TIMEOUT", "7")
        config = Config({"apijob": {"job": {"timeout": 30}}})
        assert config.get("apijob.job.timeout") == "7"

    def test_env_var_override_with_dashes(self, monkeypatch):
        monkeypatch.setenv("APIJOB_JOB_BASE_URL", "https://env.example.org")
        config = Config({"apijob": {"job": {"base-url": "https://file.example.org"}}})
        assert config.get("apijob.job.base-url") == "https://env.example.org"


class TestProfiles:
    def test_merge_profile_config(self, tmp_path):
        base = tmp_path / "apijob.yaml"
        base.write_text("apijob:\n  job:\n    timeout: 120\n    base-url: https://hs\n")

        profile = tmp_path / "apijob-dev.yaml"
        profile.write_text("apijob:\n  job:\n    timeout: 5\n")

        config = Config.from_file(base, active_profiles=["dev"])
        assert config.get("apijob.job.timeout") == 5
        assert config.get("apijob.job.base-url") == "https://hs"

    def test_later_profile_wins(self, tmp_path):
        base = tmp_path / "apijob.yaml"
        base.write_text("apijob:\n  job:\n    user-agent: base\n")
        (tmp_path / "apijob-dev.yaml").write_text("apijob:\n  job:\n    user-agent: dev\n")
        (tmp_path / "apijob-local.yaml").write_text("apijob:\n  job:\n    user-agent: local\n")

        config = Config.from_file(base, active_profiles=["dev", "local"])
        assert config.get("apijob.job.user-agent") == "local"

    def test_missing_profile_file_is_skipped(self, tmp_path):
        base = tmp_path / "apijob.yaml"
        base.write_text("apijob:\n  job:\n    timeout: 3\n")

        config = Config.from_file(base, active_profiles=["nonexistent"])
        assert config.get("apijob.job.timeout") == 3


class TestPlaceholders:
    def test_resolve_from_config(self):
        config = Config({"server": {"host": "hs.example.org"}, "apijob": {"job": {"base-url": "https://${server.host}"}}})
        assert config.get("apijob.job.base-url") == "https://hs.example.org"

    def test_resolve_from_env(self, monkeypatch):
        monkeypatch.setenv("HOMESERVER", "env.example.org")
        config = Config({"apijob": {"job": {"base-url": "https://${HOMESERVER}"}}})
        assert config.get("apijob.job.base-url") == "https://env.example.org"

    def test_default_value(self):
        config = Config({"apijob": {"job": {"base-url": "${UNSET_HOMESERVER_VAR:https://fallback}"}}})
        assert config.get("apijob.job.base-url") == "https://fallback"

    def test_unresolvable_raises(self):
        config = Config({"apijob": {"job": {"base-url": "${UNSET_HOMESERVER_VAR}"}}})
        with pytest.raises(ConfigurationException):
            config.get("apijob.job.base-url")

    def test_circular_reference_raises(self):
        config = Config({"a": "${b}", "b": "${a}"})
        with pytest.raises(ConfigurationException):
            config.get("a")


class TestConfigProperties:
    def test_bind_to_dataclass(self):
        @config_properties(prefix="apijob.sync")
        @dataclass
        class SyncProperties:
            filter_id: str = ""
            limit: int = 10

        config = Config({"apijob": {"sync": {"filter-id": "f1", "limit": 50}}})
        props = config.bind(SyncProperties)
        assert props.filter_id == "f1"
        assert props.limit == 50

    def test_bind_uses_defaults(self):
        @config_properties(prefix="apijob.sync")
        @dataclass
        class SyncProperties:
            filter_id: str = "default"
            limit: int = 10

        props = Config({}).bind(SyncProperties)
        assert props.filter_id == "default"
        assert props.limit == 10

    def test_bind_coerces_env_strings(self, monkeypatch):
        @config_properties(prefix="apijob.sync")
        @dataclass
        class SyncProperties:
            limit: int = 10
            full_state: bool = False

        monkeypatch.setenv("APIJOB_SYNC_LIMIT", "25")
        monkeypatch.setenv("APIJOB_SYNC_FULL_STATE", "true")
        props = Config({}).bind(SyncProperties)
        assert props.limit == 25
        assert props.full_state is True

    def test_bind_pydantic_model(self):
        @config_properties(prefix="apijob.sync")
        class SyncSettings(BaseModel):
            limit: int = Field(default=10, ge=1)

        props = Config({"apijob": {"sync": {"limit": "30"}}}).bind(SyncSettings)
        assert props.limit == 30

    def test_bind_pydantic_model_validation_error(self):
        @config_properties(prefix="apijob.sync")
        class SyncSettings(BaseModel):
            limit: int = Field(default=10, ge=1)

        with pytest.raises(ConfigurationException, match="SyncSettings"):
            Config({"apijob": {"sync": {"limit": 0}}}).bind(SyncSettings)

    def test_bind_undecorated_class_raises(self):
        @dataclass
        class Plain:
            value: int = 1

        with pytest.raises(ConfigurationException):
            Config({}).bind(Plain)
