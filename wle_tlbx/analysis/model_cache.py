"""On-disk cache for fitted models, keyed by a training fingerprint."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import joblib

from wle_tlbx.errors import CacheError


if TYPE_CHECKING:
    from .model_trainer import FittedModel


logger = logging.getLogger(__name__)

CACHE_FORMAT = 1


class ModelCache:
    """A single joblib file holding one fitted model and the fingerprint it was trained under.

    The blob is opaque: existence and readability at ``path`` is the whole contract.
    A model is served only when its stored fingerprint equals the requested one, so a change
    in training data or forest parameters invalidates the cache. Writes go to a temporary
    file in the same directory followed by :func:`os.replace`, so concurrent readers see
    either the previous file or the complete new one.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self, fingerprint: str) -> FittedModel | None:
        """Return the cached model for ``fingerprint``, or ``None`` on a miss.

        Raises:
            CacheError: If the cache file exists but cannot be read or has an unexpected layout.
        """
        from .model_trainer import FittedModel  # noqa: PLC0415

        if not self.exists():
            return None
        try:
            payload = joblib.load(self.path)
        except Exception as exc:  # unpickling surfaces arbitrary exception types
            raise CacheError(f"Cannot read model cache {self.path}: {exc}") from exc

        if (
            not isinstance(payload, dict)
            or payload.get("format") != CACHE_FORMAT
            or not isinstance(payload.get("model"), FittedModel)
        ):
            raise CacheError(f"Model cache {self.path} has an unexpected layout")

        if payload.get("fingerprint") != fingerprint:
            logger.info("Model cache %s is stale (fingerprint changed)", self.path)
            return None
        logger.info("Loaded cached model from %s", self.path)
        return payload["model"]

    def save(self, model: FittedModel) -> Path:
        """Atomically write ``model`` to the cache path.

        Raises:
            CacheError: If the model cannot be serialized or the file cannot be written.
        """
        payload = {"format": CACHE_FORMAT, "fingerprint": model.fingerprint, "model": model}
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            os.close(fd)
            joblib.dump(payload, tmp_name)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except Exception as exc:
            raise CacheError(f"Cannot write model cache {self.path}: {exc}") from exc
        finally:
            # the temp file only survives a failed write
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
        logger.info("Cached model at %s", self.path)
        return self.path

    def invalidate(self) -> None:
        """Delete the cache file if present."""
        self.path.unlink(missing_ok=True)


__all__ = ["ModelCache"]
