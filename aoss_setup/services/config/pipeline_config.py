from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar, Optional


@dataclass(frozen=True)
class PipelineConfig:
    """Readiness polling knobs for the provisioning pipeline.

    `max_poll_attempts=None` polls until the collection leaves CREATING, with no upper bound.
    """

    _DEFAULT_POLL_INTERVAL_SECONDS: ClassVar[float] = 30.0
    _DEFAULT_MAX_POLL_ATTEMPTS: ClassVar[int] = 60

    poll_interval_seconds: float = _DEFAULT_POLL_INTERVAL_SECONDS
    max_poll_attempts: Optional[int] = _DEFAULT_MAX_POLL_ATTEMPTS

    @staticmethod
    def from_env(
        *,
        interval_env: str = "AOSS_POLL_INTERVAL_SECONDS",
        attempts_env: str = "AOSS_MAX_POLL_ATTEMPTS",
    ) -> "PipelineConfig":
        interval_raw = os.getenv(interval_env)
        poll_interval_seconds = PipelineConfig._DEFAULT_POLL_INTERVAL_SECONDS
        if interval_raw:
            try:
                poll_interval_seconds = float(interval_raw)
            except ValueError as exc:
                raise ValueError(f"Invalid {interval_env}; must be a number") from exc
        if poll_interval_seconds < 0:
            raise ValueError(f"Invalid {interval_env}; must not be negative")

        attempts_raw = os.getenv(attempts_env)
        max_poll_attempts: Optional[int] = PipelineConfig._DEFAULT_MAX_POLL_ATTEMPTS
        if attempts_raw:
            try:
                parsed = int(attempts_raw)
            except ValueError as exc:
                raise ValueError(f"Invalid {attempts_env}; must be an integer") from exc
            # 0 (or negative) means "no limit"
            max_poll_attempts = parsed if parsed > 0 else None

        return PipelineConfig(
            poll_interval_seconds=poll_interval_seconds,
            max_poll_attempts=max_poll_attempts,
        )
