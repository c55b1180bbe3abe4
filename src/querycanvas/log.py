#
#  Copyright (C) 2017-2025 Dremio Corporation
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.
#
import logging
import sys
from os import environ
from pathlib import Path
from typing import Optional, Union

import structlog

_log_file: Optional[Path] = None


def get_log_file() -> Path:
    state = Path(environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    return state / "querycanvas" / "querycanvas.log"


def configure(enable_json_logging: bool = False, to_file: bool = False):
    global _log_file
    handlers = [logging.StreamHandler(sys.stderr)]
    if to_file:
        _log_file = get_log_file()
        _log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(_log_file))

    logging.basicConfig(format="%(message)s", handlers=handlers, force=True)

    renderer = (
        structlog.processors.JSONRenderer()
        if enable_json_logging
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def set_level(level: Union[str, int]):
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.getLogger().setLevel(level)


def logger(name: Optional[str] = None):
    return structlog.get_logger(name)
