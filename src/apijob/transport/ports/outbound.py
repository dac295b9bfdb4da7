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
"""Outbound port: transport provider interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from apijob.transport.types import TransportReply, TransportRequest


@runtime_checkable
class TransportPort(Protocol):
    """Abstract transport provider.

    ``send`` resolves with a reply for any HTTP status. Failures below HTTP
    are raised as ``TransportException`` subclasses. Cancelling the awaiting
    task cancels the outstanding operation.
    """

    async def send(self, request: TransportRequest) -> TransportReply: ...

    async def close(self) -> None: ...
