"""Runtime settings for the bus, loaded from defaults plus environment overrides."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_ENV_PREFIX = "EVENTBUS_"


class BusSettings(BaseModel):
    """Logging settings for applications embedding the bus.

    Precedence: defaults < ``EVENTBUS_*`` environment variables.
    """

    log_level: LogLevel = "WARNING"
    log_json: bool = False
    log_colors: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BusSettings:
        env = os.environ if environ is None else environ
        data: dict[str, str] = {}
        for name in cls.model_fields:
            raw = env.get(f"{_ENV_PREFIX}{name.upper()}")
            if raw is not None and raw.strip():
                data[name] = raw.strip()
        if "log_level" in data:
            data["log_level"] = data["log_level"].upper()
        return cls.model_validate(data)
