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
"""Job notifications and their synchronous listener registry."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from apijob.job.base_job import BaseJob

logger = structlog.get_logger("apijob.job.events")

JobListener = Callable[["BaseJob"], None]


class JobEvent(Enum):
    """The four notifications a job can send.

    FINISHED and RESULT fire for every natural termination; exactly one of
    SUCCESS or FAILURE follows. None of them fire for an abandoned job.
    """

    FINISHED = "finished"
    RESULT = "result"
    SUCCESS = "success"
    FAILURE = "failure"


class JobSignals:
    """Per-job listener registry, dispatched in subscription order."""

    def __init__(self) -> None:
        self._listeners: dict[JobEvent, list[JobListener]] = {}

    def subscribe(self, event: JobEvent, listener: JobListener) -> None:
        """Register *listener* for *event*."""
        if event not in self._listeners:
            self._listeners[event] = []
        self._listeners[event].append(listener)

    def unsubscribe(self, event: JobEvent, listener: JobListener) -> None:
        """Remove *listener* from *event*; unknown listeners are ignored."""
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: JobEvent) -> int:
        return len(self._listeners.get(event, []))

    def dispatch(self, event: JobEvent, job: BaseJob) -> None:
        """Call every listener of *event* with *job*.

        A raising listener is logged and does not stop delivery to the
        listeners after it.
        """
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(job)
            except Exception:
                logger.exception(
                    "job_listener_failed",
                    job=job.name,
                    job_event=event.value,
                    listener=getattr(listener, "__qualname__", repr(listener)),
                )

    def clear(self) -> None:
        """Drop every listener."""
        self._listeners.clear()
