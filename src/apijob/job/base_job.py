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
"""BaseJob — one asynchronous request against the remote API.

A job builds its request from ``api_path()``, ``query()`` and ``data()``,
sends it through the connection's transport, and runs the reply through
``check_reply -> parse_reply -> parse_json``. Every natural end goes through
``emit_result()``, which notifies observers exactly once:

    finished -> result -> success | failure

``abandon()`` ends the job quietly: no notification is ever sent after it.

Usage:
    class GetProfileJob(BaseJob):
        def __init__(self, connection: ConnectionData, user_id: str) -> None:
            super().__init__(connection, HttpMethod.GET, "GetProfileJob", requires_auth=False)
            self._user_id = user_id
            self.displayname: str | None = None

        def api_path(self) -> str:
            return f"/_matrix/client/r0/profile/{self._user_id}"

        def parse_json(self, document: Any) -> Terminated:
            if "displayname" not in document:
                return self.fail(ErrorCode.USER_DEFINED_ERROR, "No displayname in reply")
            self.displayname = document["displayname"]
            return self.emit_result()

    job = GetProfileJob(connection, "@alice:example.org")
    job.on_success(lambda j: print(j.displayname))
    job.start()
"""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

import structlog

from apijob.job.connection import ConnectionData
from apijob.job.events import JobEvent, JobListener, JobSignals
from apijob.job.types import TERMINATED, ErrorCode, HttpMethod, JobState, Terminated
from apijob.kernel.exceptions import (
    JobStateException,
    TransportException,
    TransportTimeoutException,
    TransportTlsException,
)
from apijob.transport.types import TransportReply, TransportRequest

logger = structlog.get_logger("apijob.job")

_ACCESS_DENIED_STATUSES = frozenset({401, 403})


class BaseJob(ABC):
    """Base class for every request type.

    Args:
        connection: Transport, credentials and timeout shared with other jobs.
        method: HTTP method, fixed for the job's lifetime.
        name: Human-readable name used in log events.
        requires_auth: Attach the connection's access token when sending.
    """

    def __init__(
        self,
        connection: ConnectionData,
        method: HttpMethod,
        name: str,
        requires_auth: bool = True,
    ) -> None:
        self._connection = connection
        self._method = method
        self._name = name
        self._requires_auth = requires_auth
        self._state = JobState.CREATED
        self._error_code = int(ErrorCode.NO_ERROR)
        self._error_text = ""
        self._signals = JobSignals()
        self._send_task: asyncio.Task[TransportReply] | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._emitted = False
        self._released = False
        self._release_callbacks: list[Callable[[BaseJob], None]] = []
        self._done = asyncio.Event()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self._name!r} state={self._state.value} error={self._error_code}>"

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def http_method(self) -> HttpMethod:
        return self._method

    @property
    def requires_auth(self) -> bool:
        return self._requires_auth

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def connection(self) -> ConnectionData:
        return self._connection

    @property
    def is_pending(self) -> bool:
        """True while a transport send is outstanding."""
        return self._send_task is not None and not self._send_task.done()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, event: JobEvent, listener: JobListener) -> None:
        """Register a synchronous *listener* for *event*."""
        self._signals.subscribe(event, listener)

    def unsubscribe(self, event: JobEvent, listener: JobListener) -> None:
        self._signals.unsubscribe(event, listener)

    def on_finished(self, listener: JobListener) -> None:
        self.subscribe(JobEvent.FINISHED, listener)

    def on_result(self, listener: JobListener) -> None:
        self.subscribe(JobEvent.RESULT, listener)

    def on_success(self, listener: JobListener) -> None:
        self.subscribe(JobEvent.SUCCESS, listener)

    def on_failure(self, listener: JobListener) -> None:
        self.subscribe(JobEvent.FAILURE, listener)

    def on_released(self, callback: Callable[[BaseJob], None]) -> None:
        """Call *callback* once the job has released its resources.

        Fires after the terminal notifications, or right away on abandonment.
        Used by owners such as ``JobRegistry`` to drop their reference.
        """
        if self._released:
            callback(self)
            return
        self._release_callbacks.append(callback)

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Send the request. Must be called from a running event loop.

        Raises:
            JobStateException: If the job was already started or abandoned.
        """
        if self._state is not JobState.CREATED:
            raise JobStateException(
                f"Job '{self._name}' cannot be started in state {self._state.value}",
                code="JOB_NOT_STARTABLE",
                context={"job": self._name, "state": self._state.value},
            )
        loop = asyncio.get_running_loop()
        self._state = JobState.RUNNING

        headers = {"Content-Type": "application/json"}
        if self._requires_auth:
            token = self._connection.access_token
            if not token:
                self.fail(ErrorCode.CONTENT_ACCESS_ERROR, "No access token to authorize the request")
                return
            headers["Authorization"] = f"Bearer {token}"

        request = TransportRequest(
            method=self._method.value,
            path=self.api_path(),
            query=self.query(),
            body=None if self._method is HttpMethod.GET else self.data(),
            headers=headers,
        )

        self._send_task = loop.create_task(
            self._connection.transport.send(request),
            name=f"apijob:{self._name}",
        )
        self._send_task.add_done_callback(self._got_reply)
        timeout = self._connection.timeout.total_seconds()
        self._timer = loop.call_later(timeout, self._timed_out)
        self._state = JobState.AWAITING_REPLY
        logger.debug("job_started", job=self._name, method=request.method, path=request.path, timeout=timeout)

    def abandon(self) -> None:
        """Quietly drop the job, arrived reply or not.

        Cancels the pending request and releases the job. No notification is
        sent. Calling it again, or after the job finished, does nothing.
        """
        if self._emitted or self._state is JobState.ABANDONED:
            return
        previous = self._state
        self._state = JobState.ABANDONED
        logger.info("job_abandoned", job=self._name, previous_state=previous.value)
        self._release()

    def error(self) -> int:
        """The error code; 0 means no error."""
        return self._error_code

    def error_string(self) -> str:
        """Diagnostic text for ``error()``. Override for richer messages."""
        return self._error_text

    async def wait(self) -> BaseJob:
        """Return once the job has finished or been abandoned."""
        await self._done.wait()
        return self

    # ------------------------------------------------------------------
    # Extension contract
    # ------------------------------------------------------------------

    @abstractmethod
    def api_path(self) -> str:
        """Endpoint path, relative to the transport's base URL."""

    def query(self) -> Mapping[str, Any]:
        """Query parameters."""
        return {}

    def data(self) -> Mapping[str, Any]:
        """JSON body sent with PUT and POST requests."""
        return {}

    def check_reply(self, reply: TransportReply) -> bool:
        """Check the status line before the body is processed.

        Return False to stop the pipeline. A rejecting override must call
        ``fail()``, or at least ``set_error()``, before returning: a job left
        without any error is only ended by its timeout.
        """
        if reply.is_success:
            return True
        text = f"{reply.status_code} {reply.reason}".strip()
        if reply.status_code in _ACCESS_DENIED_STATUSES:
            self.fail(ErrorCode.CONTENT_ACCESS_ERROR, text)
        else:
            self.fail(ErrorCode.NETWORK_ERROR, text)
        return False

    def parse_reply(self, data: bytes) -> Terminated:
        """Decode the body as a JSON object or array and hand it to ``parse_json``.

        Overrides must call ``fail()`` or ``emit_result()`` exactly once on
        every path and return what it returned.
        """
        try:
            document = json.loads(data)
        except ValueError as exc:
            return self.fail(ErrorCode.JSON_PARSE_ERROR, str(exc))
        except RecursionError:
            return self.fail(ErrorCode.JSON_PARSE_ERROR, "JSON document is too deeply nested")
        if not isinstance(document, (dict, list)):
            return self.fail(ErrorCode.JSON_PARSE_ERROR, "JSON document must be an object or an array")
        return self.parse_json(document)

    def parse_json(self, document: Any) -> Terminated:
        """Process a valid JSON document. By default succeeds without looking.

        Same obligation as ``parse_reply()``.
        """
        return self.emit_result()

    # ------------------------------------------------------------------
    # Pipeline mutators
    # ------------------------------------------------------------------

    def set_error(self, code: int) -> None:
        """Record *code* unless an error is already recorded."""
        if self._error_code == ErrorCode.NO_ERROR:
            self._error_code = int(code)

    def set_error_text(self, text: str) -> None:
        self._error_text = text

    def fail(self, code: int, text: str) -> Terminated:
        """Record the failure and end the job.

        The first recorded failure wins: a job that already carries an error
        keeps its code and text.
        """
        if self._error_code == ErrorCode.NO_ERROR:
            self.set_error(code)
            self.set_error_text(text)
        return self.emit_result()

    def emit_result(self) -> Terminated:
        """Notify observers of the outcome and schedule release.

        Sends finished, result, then success or failure. Repeated calls and
        calls after ``abandon()`` send nothing.
        """
        if self._state is JobState.ABANDONED:
            return TERMINATED
        if self._emitted:
            logger.error("job_emit_result_repeated", job=self._name, error=self._error_code)
            return TERMINATED
        self._emitted = True
        self._cancel_timer()
        self._cancel_send()
        self._state = JobState.FINISHED

        if self._error_code == ErrorCode.NO_ERROR:
            logger.debug("job_succeeded", job=self._name)
        else:
            logger.warning("job_failed", job=self._name, error=self._error_code, error_text=self.error_string())

        self._signals.dispatch(JobEvent.FINISHED, self)
        self._signals.dispatch(JobEvent.RESULT, self)
        if self._error_code == ErrorCode.NO_ERROR:
            self._signals.dispatch(JobEvent.SUCCESS, self)
        else:
            self._signals.dispatch(JobEvent.FAILURE, self)

        try:
            asyncio.get_running_loop().call_soon(self._release)
        except RuntimeError:
            self._release()
        return TERMINATED

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _got_reply(self, task: asyncio.Task[TransportReply]) -> None:
        if task.cancelled():
            if self._state is JobState.AWAITING_REPLY:
                self.fail(ErrorCode.NETWORK_ERROR, "The request was cancelled")
            return
        exc = task.exception()
        if self._state is not JobState.AWAITING_REPLY:
            return
        self._send_task = None
        if exc is not None:
            self._transport_failed(exc)
            return
        self._run_pipeline(task.result())

    def _run_pipeline(self, reply: TransportReply) -> None:
        accepted = self.check_reply(reply)
        if self._ended:
            return
        if self._error_code != ErrorCode.NO_ERROR:
            self.emit_result()
            return
        if not accepted:
            logger.error("job_stage_did_not_terminate", job=self._name, stage="check_reply")
            return

        self.parse_reply(reply.body)
        if not self._ended:
            logger.error("job_stage_did_not_terminate", job=self._name, stage="parse_reply")

    def _transport_failed(self, exc: BaseException) -> None:
        if isinstance(exc, TransportTimeoutException):
            self.fail(ErrorCode.TIMEOUT_ERROR, str(exc))
        elif isinstance(exc, TransportTlsException):
            logger.warning("job_tls_error", job=self._name, error=str(exc))
            self.fail(ErrorCode.NETWORK_ERROR, str(exc))
        elif isinstance(exc, TransportException):
            self.fail(ErrorCode.NETWORK_ERROR, str(exc))
        else:
            logger.error(
                "job_transport_crashed",
                job=self._name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            self.fail(ErrorCode.NETWORK_ERROR, f"{type(exc).__name__}: {exc}")

    def _timed_out(self) -> None:
        self._timer = None
        if self._state is not JobState.AWAITING_REPLY:
            return
        logger.warning("job_timed_out", job=self._name, timeout=self._connection.timeout.total_seconds())
        self.fail(ErrorCode.TIMEOUT_ERROR, "The job has timed out")

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    @property
    def _ended(self) -> bool:
        return self._emitted or self._state is JobState.ABANDONED

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _cancel_send(self) -> None:
        if self._send_task is not None:
            if not self._send_task.done():
                self._send_task.cancel()
            self._send_task = None

    def _release(self) -> None:
        if self._released:
            return
        self._released = True
        self._cancel_timer()
        self._cancel_send()
        self._signals.clear()
        callbacks, self._release_callbacks = self._release_callbacks, []
        for callback in callbacks:
            callback(self)
        self._done.set()
