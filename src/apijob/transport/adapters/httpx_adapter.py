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
"""httpx-based transport adapter."""

from __future__ import annotations

import ssl
from datetime import timedelta

import httpx
import structlog

from apijob.config.properties.job import JobProperties
from apijob.core.config import Config
from apijob.kernel.exceptions import (
    TransportConnectionException,
    TransportException,
    TransportTimeoutException,
    TransportTlsException,
)
from apijob.transport.types import TransportReply, TransportRequest

logger = structlog.get_logger("apijob.transport")


def _find_ssl_error(exc: BaseException) -> ssl.SSLError | None:
    """Walk the cause chain; httpx wraps the ssl error inside httpcore's own."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, ssl.SSLError):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


class HttpxTransportAdapter:
    """Transport provider backed by httpx.AsyncClient.

    Args:
        base_url: Base URL every request path is resolved against.
        timeout: Transport-level timeout; jobs run their own timer on top.
        headers: Default headers sent with every request.
        transport: Optional httpx transport (e.g. ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: timedelta = timedelta(seconds=30),
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout.total_seconds(),
            headers=headers or {},
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: Config,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HttpxTransportAdapter:
        """Build an adapter from the apijob.job section of config."""
        props = config.bind(JobProperties)
        return cls(
            base_url=props.base_url,
            timeout=timedelta(seconds=props.timeout),
            headers={"User-Agent": props.user_agent},
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    async def send(self, request: TransportRequest) -> TransportReply:
        """Send *request* and return its reply, whatever the HTTP status."""
        try:
            response = await self._client.request(
                request.method,
                request.path,
                params=dict(request.query),
                json=dict(request.body) if request.body is not None else None,
                headers=dict(request.headers),
            )
        except httpx.TimeoutException as exc:
            raise TransportTimeoutException(
                str(exc) or "Transport timed out",
                code="TRANSPORT_TIMEOUT",
                context={"method": request.method, "path": request.path},
            ) from exc
        except httpx.TransportError as exc:
            raise self._map_transport_error(request, exc) from exc

        return TransportReply(
            status_code=response.status_code,
            reason=response.reason_phrase,
            headers=dict(response.headers),
            body=response.content,
        )

    @staticmethod
    def _map_transport_error(request: TransportRequest, exc: httpx.TransportError) -> TransportException:
        context = {"method": request.method, "path": request.path}
        cause = _find_ssl_error(exc)
        if isinstance(exc, httpx.ConnectError) and cause is not None:
            logger.warning("transport_tls_error", error=str(cause), **context)
            return TransportTlsException(str(cause) or str(exc), code="TRANSPORT_TLS", context=context)
        return TransportConnectionException(
            str(exc) or type(exc).__name__,
            code="TRANSPORT_CONNECTION",
            context=context,
        )

    async def start(self) -> None:
        """No-op -- httpx client is ready after construction."""

    async def stop(self) -> None:
        """Close the underlying HTTP client."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
