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
"""StructlogAdapter: renders apijob job events through structlog and stdlib logging."""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Any

import structlog

from apijob.config.properties.logging import LoggingProperties
from apijob.core.config import Config


def render_enum_names(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Show ``ErrorCode`` / ``JobState`` values by name (``error=TIMEOUT_ERROR``)."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.name
    return event_dict


class StructlogAdapter:
    """Default LoggingPort for apijob.

    The root level applies to stdlib logging as a whole; every other key
    under ``apijob.logging.level`` names a logger such as ``apijob.job``
    or ``apijob.transport``.
    """

    def __init__(self) -> None:
        self.properties = LoggingProperties()

    def configure(self, properties: LoggingProperties) -> None:
        self.properties = properties
        levels = dict(properties.level)
        root = str(levels.pop("root", "INFO"))

        renderer: structlog.types.Processor
        if properties.format.lower() == "json":
            renderer = structlog.processors.JSONRenderer()
        else:
            renderer = structlog.dev.ConsoleRenderer()

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                render_enum_names,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.UnicodeDecoder(),
                renderer,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            # job modules hold module-level loggers; reconfiguring must reach them
            cache_logger_on_first_use=False,
        )

        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout if properties.stream.lower() == "stdout" else sys.stderr,
            level=_level(root),
            force=True,
        )
        for name, level in levels.items():
            self.set_level(name, str(level))

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(_level(level))


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(config: Config | None = None) -> StructlogAdapter:
    """Set up apijob logging from ``apijob.logging.*`` and return the adapter.

    Without a config the packaged defaults are used. Applications that own
    their logging setup can skip this and attach handlers to the
    ``apijob`` loggers themselves.
    """
    config = config if config is not None else Config.defaults()
    adapter = StructlogAdapter()
    adapter.configure(config.bind(LoggingProperties))
    return adapter
