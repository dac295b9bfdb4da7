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
"""Registry of in-flight jobs."""

from __future__ import annotations

from typing import TypeVar

import structlog

from apijob.job.base_job import BaseJob

logger = structlog.get_logger("apijob.job.registry")

J = TypeVar("J", bound=BaseJob)


class JobRegistry:
    """Owns started jobs until they release themselves.

    A job stays registered until its terminal notifications have been
    dispatched, or until it is abandoned. ``stop()`` abandons whatever is
    still in flight.
    """

    def __init__(self) -> None:
        self._jobs: dict[int, BaseJob] = {}

    def submit(self, job: J) -> J:
        """Register and start *job*, returning it."""
        key = id(job)
        self._jobs[key] = job
        job.on_released(self._forget)
        try:
            job.start()
        except Exception:
            self._jobs.pop(key, None)
            raise
        return job

    def in_flight(self) -> list[BaseJob]:
        return list(self._jobs.values())

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job: object) -> bool:
        return self._jobs.get(id(job)) is job

    def abandon_all(self) -> int:
        """Abandon every registered job; returns how many were abandoned."""
        jobs = list(self._jobs.values())
        for job in jobs:
            job.abandon()
        if jobs:
            logger.info("jobs_abandoned", count=len(jobs))
        return len(jobs)

    def _forget(self, job: BaseJob) -> None:
        self._jobs.pop(id(job), None)

    async def start(self) -> None:
        """No-op -- the registry is ready after construction."""

    async def stop(self) -> None:
        """Abandon all in-flight jobs."""
        self.abandon_all()
