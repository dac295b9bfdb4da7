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
"""Tests for @config_properties dataclass binding per subsystem."""

from apijob.config.properties import JobProperties, LoggingProperties
from apijob.core.config import Config


class TestJobProperties:
    def test_bind_defaults(self):
        props = Config({}).bind(JobProperties)
        assert props.timeout == 120.0
        assert props.base_url == ""
        assert props.user_agent == "apijob"

    def test_bind_packaged_defaults(self):
        props = Config.defaults().bind(JobProperties)
        assert props.timeout == 120.0
        assert props.user_agent == "apijob"

    def test_bind_custom_values(self):
        config = Config({"apijob": {"job": {"timeout": 30, "base-url": "https://hs.example.org", "user-agent": "bot/2"}}})
        props = config.bind(JobProperties)
        assert props.timeout == 30.0
        assert isinstance(props.timeout, float)
        assert props.base_url == "https://hs.example.org"
        assert props.user_agent == "bot/2"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("APIJOB_JOB_TIMEOUT", "2.5")
        props = Config.defaults().bind(JobProperties)
        assert props.timeout == 2.5


class TestLoggingProperties:
    def test_bind_defaults(self):
        props = Config({}).bind(LoggingProperties)
        assert props.format == "console"
        assert props.stream == "stderr"
        assert props.level == {"root": "INFO"}

    def test_bind_custom_values(self):
        config = Config({"apijob": {"logging": {"format": "json", "stream": "stdout", "level": {"root": "WARNING"}}}})
        props = config.bind(LoggingProperties)
        assert props.format == "json"
        assert props.stream == "stdout"
        assert props.level == {"root": "WARNING"}
