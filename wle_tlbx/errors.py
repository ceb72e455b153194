"""Error taxonomy for the WLE classification pipeline.

Every error carries the pipeline ``stage`` it surfaced in so the command line
entry point can report *where* a run failed, not only *why*.
"""


class PipelineError(Exception):
    """Base class for all pipeline failures.

    Attributes:
        stage: Name of the pipeline stage that failed (``load``, ``prune``,
            ``variance_filter``, ``partition``, ``train``, ``evaluate``, ``cache``).
            ``None`` until the stage is known.
    """

    default_stage: str | None = None

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage or self.default_stage

    def describe(self) -> str:
        """Return a one-line description including the failing stage."""
        return f"[{self.stage or 'unknown'}] {type(self).__name__}: {self}"


class DatasetIOError(PipelineError, OSError):
    """Input file is missing, unreadable, or malformed (inconsistent field counts)."""

    default_stage = "load"


class SchemaError(PipelineError, ValueError):
    """Expected columns are absent or a data precondition (e.g. bimodal missingness) is violated."""


class TrainingError(PipelineError, RuntimeError):
    """Training data is degenerate (too few rows, constant features, single label level)."""

    default_stage = "train"


class CacheError(PipelineError, OSError):
    """Cache file exists but cannot be read. Recoverable by deleting the cache and retraining."""

    default_stage = "cache"


__all__ = ["CacheError", "DatasetIOError", "PipelineError", "SchemaError", "TrainingError"]
