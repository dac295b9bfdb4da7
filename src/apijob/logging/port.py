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
"""Logging port: how an application hands apijob's log output to its own setup."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from apijob.config.properties.logging import LoggingProperties


@runtime_checkable
class LoggingPort(Protocol):
    """Contract for whatever renders the ``apijob.*`` log events.

    Jobs, the registry and the transport only call ``structlog.get_logger``;
    an implementation decides where those events go and at which level.
    """

    def configure(self, properties: LoggingProperties) -> None: ...
    def get_logger(self, name: str) -> Any: ...
    def set_level(self, name: str, level: str) -> None: ...
