"""Limits and fixed strings used by the thumbnail pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

# Bail if the embedded image is larger than this on either side.
DEFAULT_MAX_INPUT_DIMENSION = 1024
# No file manager asks for anything near this, but an accidental huge
# request would cost a lot of time and memory.
DEFAULT_MAX_REQUESTED_SIZE = 2048
MIME_TYPE = "application/x.fuzzpaint-doc"
SOFTWARE = "Fuzzpaint"


@dataclass(frozen=True)
class ThumbnailerConfig:
    max_input_dimension: int = DEFAULT_MAX_INPUT_DIMENSION
    max_requested_size: int = DEFAULT_MAX_REQUESTED_SIZE
    mime_type: str = MIME_TYPE
    software: str = SOFTWARE

    @classmethod
    def from_env(cls) -> "ThumbnailerConfig":
        """Build a config, applying ``FZP_THUMB_*`` overrides from the environment.

        Unset or empty variables keep the defaults. The environment can only
        tighten a limit: a value that is not a positive integer, or that is
        above the built-in default, raises ``ValueError``.
        """

        config = cls()
        overrides = {}
        for field_name, env_name, ceiling in (
            ("max_input_dimension", "FZP_THUMB_MAX_DIMENSION", DEFAULT_MAX_INPUT_DIMENSION),
            ("max_requested_size", "FZP_THUMB_MAX_SIZE", DEFAULT_MAX_REQUESTED_SIZE),
        ):
            raw = os.environ.get(env_name, "").strip()
            if not raw:
                continue
            value = int(raw)
            if value <= 0:
                raise ValueError(f"{env_name} must be a positive integer, got {raw!r}")
            if value > ceiling:
                raise ValueError(f"{env_name} must not exceed {ceiling}, got {value}")
            overrides[field_name] = value
        return replace(config, **overrides) if overrides else config


__all__ = [
    "ThumbnailerConfig",
    "DEFAULT_MAX_INPUT_DIMENSION",
    "DEFAULT_MAX_REQUESTED_SIZE",
    "MIME_TYPE",
    "SOFTWARE",
]
