"""Run configuration for the NCD engine and scripts."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from .models.compressors import READ_CHUNK, Algorithm, CompressionLevel

ENV_PREFIX = "NCD_"
_TRUE = {"1", "true", "yes", "on"}


class NCDConfig(BaseModel):
    algorithm: Algorithm = Algorithm.GZIP
    level: CompressionLevel = CompressionLevel.DEFAULT
    workers: Optional[int] = Field(None, ge=1)      # None → os.cpu_count()
    is_file: bool = False
    chunk_size: int = Field(READ_CHUNK, ge=1)

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "NCDConfig":
        """Build a config from ``NCD_*`` variables; keyword overrides win."""
        env = os.environ if environ is None else environ
        values = {}
        for field in ("algorithm", "level", "workers", "chunk_size"):
            raw = env.get(f"{ENV_PREFIX}{field.upper()}")
            if raw:
                values[field] = raw.strip()
        raw_flag = env.get(f"{ENV_PREFIX}IS_FILE")
        if raw_flag:
            values["is_file"] = raw_flag.strip().lower() in _TRUE
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
