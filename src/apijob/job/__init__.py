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
"""apijob jobs — the request/response life cycle of a single API call."""

from apijob.job.base_job import BaseJob
from apijob.job.connection import ConnectionData
from apijob.job.events import JobEvent, JobListener, JobSignals
from apijob.job.registry import JobRegistry
from apijob.job.types import TERMINATED, ErrorCode, HttpMethod, JobState, Terminated

__all__ = [
    "TERMINATED",
    "BaseJob",
    "ConnectionData",
    "ErrorCode",
    "HttpMethod",
    "JobEvent",
    "JobListener",
    "JobRegistry",
    "JobSignals",
    "JobState",
    "Terminated",
]
