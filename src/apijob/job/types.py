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
"""Job types: HTTP methods, states, error codes and the termination token."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import final


class HttpMethod(str, Enum):
    """HTTP method a job is issued with; fixed at construction."""

    GET = "GET"
    PUT = "PUT"
    POST = "POST"


class JobState(Enum):
    """Life cycle of a job.

    CREATED -> RUNNING -> AWAITING_REPLY -> FINISHED, or ABANDONED from any
    non-terminal state.
    """

    CREATED = "CREATED"
    RUNNING = "RUNNING"
    AWAITING_REPLY = "AWAITING_REPLY"
    FINISHED = "FINISHED"
    ABANDONED = "ABANDONED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.FINISHED, JobState.ABANDONED)


class ErrorCode(IntEnum):
    """Error codes reported by ``BaseJob.error()``.

    Concrete job types define their own codes starting at USER_DEFINED_ERROR:

        class SyncError(IntEnum):
            INVALID_FILTER = ErrorCode.USER_DEFINED_ERROR + 1
    """

    NO_ERROR = 0
    NETWORK_ERROR = 100
    JSON_PARSE_ERROR = 101
    TIMEOUT_ERROR = 102
    CONTENT_ACCESS_ERROR = 103
    USER_DEFINED_ERROR = 512


@final
class Terminated:
    """Proof that a pipeline stage ended the job.

    Only ``BaseJob.fail()`` and ``BaseJob.emit_result()`` hand out the
    ``TERMINATED`` instance, so a stage annotated ``-> Terminated`` must
    reach one of them on every path.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "TERMINATED"


TERMINATED = Terminated()
