"""Environment-driven settings for detection and watching.

Settings are read at the start of every detection request so that tests
(and long-lived processes) can change the environment without re-importing
the library.

Environment Variables:
    ANDROIDLIB_SKIP_GLOBAL_SEARCH_PATHS: Do not scan platform default roots.
    ANDROIDLIB_SKIP_ENVIRONMENT_PATHS: Ignore detector env-var overrides
        such as ``ANDROID_NDK``.
    ANDROIDLIB_WATCH_DEBOUNCE: Seconds to wait for a burst of filesystem
        events to settle before re-detecting (default 0.25). Only read
        when a watch session starts without an explicit debounce.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from androidlib.exceptions import ConfigurationError

SKIP_GLOBAL_SEARCH_PATHS_VAR = "ANDROIDLIB_SKIP_GLOBAL_SEARCH_PATHS"
SKIP_ENVIRONMENT_PATHS_VAR = "ANDROIDLIB_SKIP_ENVIRONMENT_PATHS"
WATCH_DEBOUNCE_VAR = "ANDROIDLIB_WATCH_DEBOUNCE"

DEFAULT_WATCH_DEBOUNCE: float = 0.25

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    """Knobs that alter where detection looks and how watching behaves.

    Attributes:
        skip_global_search_paths: When True, platform default search roots
            are not scanned; only explicit and env-var paths are used.
        skip_environment_paths: When True, detector env-var overrides are
            ignored.
        watch_debounce: Quiet period, in seconds, before a re-scan runs.
    """

    skip_global_search_paths: bool = False
    skip_environment_paths: bool = False
    watch_debounce: float = DEFAULT_WATCH_DEBOUNCE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, *, watch: bool = False) -> Settings:
        """Build settings from the process environment.

        Args:
            environ: Mapping to read instead of ``os.environ`` (for testing).
            watch: Also read the watch-only settings. Plain detection
                leaves ``watch_debounce`` at its default, so a malformed
                watch setting never breaks it.

        Returns:
            A populated ``Settings`` instance.

        Raises:
            ConfigurationError: If ``watch`` is set and
                ``ANDROIDLIB_WATCH_DEBOUNCE`` is not a positive number.
        """
        env = os.environ if environ is None else environ
        debounce = DEFAULT_WATCH_DEBOUNCE
        raw = env.get(WATCH_DEBOUNCE_VAR, "").strip() if watch else ""
        if raw:
            try:
                debounce = float(raw)
            except ValueError:
                raise ConfigurationError(
                    f"{WATCH_DEBOUNCE_VAR} must be a number, got {raw!r}"
                ) from None
            if not debounce > 0:
                raise ConfigurationError(
                    f"{WATCH_DEBOUNCE_VAR} must be greater than zero, got {raw!r}"
                )
        return cls(
            skip_global_search_paths=_flag(env, SKIP_GLOBAL_SEARCH_PATHS_VAR),
            skip_environment_paths=_flag(env, SKIP_ENVIRONMENT_PATHS_VAR),
            watch_debounce=debounce,
        )
