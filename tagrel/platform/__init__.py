"""Platform abstraction layer."""

from .process import ProcessError, merged_env, run, run_streaming

__all__ = [
    "ProcessError",
    "merged_env",
    "run",
    "run_streaming",
]
