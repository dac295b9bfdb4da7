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
"""Shared fakes for job tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import timedelta

import pytest

from apijob.job.base_job import BaseJob
from apijob.job.connection import ConnectionData
from apijob.job.events import JobEvent
from apijob.transport.types import TransportReply, TransportRequest


class FakeTransport:
    """Transport whose replies are delivered by the test, one future per send."""

    def __init__(self) -> None:
        self.requests: list[TransportRequest] = []
        self.cancelled = 0
        self.closed = False
        self._pending: list[asyncio.Future[TransportReply]] = []

    async def send(self, request: TransportRequest) -> TransportReply:
        self.requests.append(request)
        future: asyncio.Future[TransportReply] = asyncio.get_running_loop().create_future()
        self._pending.append(future)
        try:
            return await future
        except asyncio.CancelledError:
            self.cancelled += 1
            raise

    def reply(self, status_code: int = 200, body: bytes = b"{}", reason: str = "OK") -> None:
        self._pending[-1].set_result(TransportReply(status_code=status_code, reason=reason, body=body))

    def raise_error(self, exc: BaseException) -> None:
        self._pending[-1].set_exception(exc)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def connection(transport: FakeTransport) -> ConnectionData:
    return ConnectionData(transport, access_token="secret-token", timeout=timedelta(seconds=5))


@pytest.fixture
def record() -> Callable[[BaseJob], list[str]]:
    """Subscribe to all four notifications of a job and collect their names."""

    def _record(job: BaseJob) -> list[str]:
        events: list[str] = []
        for event in JobEvent:
            job.subscribe(event, lambda _job, name=event.value: events.append(name))
        return events

    return _record
