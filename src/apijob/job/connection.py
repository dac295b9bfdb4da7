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
"""Connection data shared by every job issued against one server."""

from __future__ import annotations

from datetime import timedelta

from apijob.config.properties.job import JobProperties
from apijob.core.config import Config
from apijob.transport.ports.outbound import TransportPort


class ConnectionData:
    """Session collaborator handed to each job.

    Holds the transport provider, the access token and the per-job timeout.
    Jobs only read from it; the owning session updates the token.
    """

    def __init__(
        self,
        transport: TransportPort,
        access_token: str | None = None,
        timeout: timedelta = timedelta(seconds=120),
    ) -> None:
        self._transport = transport
        self._access_token = access_token
        self._timeout = timeout

    @classmethod
    def from_config(
        cls,
        config: Config,
        transport: TransportPort,
        access_token: str | None = None,
    ) -> ConnectionData:
        """Build connection data using the apijob.job section of config."""
        props = config.bind(JobProperties)
        return cls(transport, access_token=access_token, timeout=timedelta(seconds=props.timeout))

    @property
    def transport(self) -> TransportPort:
        return self._transport

    @property
    def access_token(self) -> str | None:
        return self._access_token

    @property
    def timeout(self) -> timedelta:
        return self._timeout

    def set_access_token(self, token: str | None) -> None:
        """Replace the token used by jobs started from now on."""
        self._access_token = token
