"""Fingerprinted embedding cache — skips re-embedding when the team corpus is unchanged.

Two locations, checked in order:
    1. Pre-built artifact (read-only, shipped with the team data; produced
       offline by ``scout-rag-generate-cache``)
    2. Working artifact (written by the running process; survives restarts)

A cache hit needs an exact fingerprint match and an embedding on every
chunk. Anything else is a miss and the caller rebuilds from scratch.
"""

import hashlib
import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from scout_rag.application.interfaces.embedding_cache import EmbeddingCache
from scout_rag.domain.entities.chunk import CacheArtifact, EmbeddedChunk
from scout_rag.domain.entities.team_record import TeamRecord
from scout_rag.domain.exceptions import CacheMismatchError

logger = logging.getLogger(__name__)

_FINGERPRINT_LENGTH = 16


def compute_fingerprint(teams: Iterable[TeamRecord]) -> str:
    """Hash the (team name, match count) pairs of a corpus, independent of order.

    Detects whether the corpus needs re-embedding; it does not track
    per-chunk changes.
    """
    projection = sorted(
        ({"n": t.team_name, "m": t.matches_analyzed} for t in teams),
        key=lambda item: item["n"],
    )
    canonical = json.dumps(projection, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:_FINGERPRINT_LENGTH]


def write_artifact(path: str | Path, fingerprint: str, chunks: Sequence[EmbeddedChunk]) -> int:
    """Serialize chunks to ``path`` and return the number of bytes written."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(CacheArtifact(fingerprint, tuple(chunks)).to_dict())
    target.write_text(payload, encoding="utf-8")
    return len(payload.encode("utf-8"))


def read_artifact(path: Path, fingerprint: str) -> CacheArtifact:
    """Read and validate one artifact.

    Raises:
        OSError / ValueError: If the file is missing or not a valid artifact.
        CacheMismatchError: If the artifact cannot stand in for a fresh build.
    """
    data = json.loads(path.read_text("utf-8"))
    try:
        artifact = CacheArtifact.from_dict(data)
    except (KeyError, TypeError) as exc:
        raise ValueError(f"not a cache artifact: {exc}") from exc

    if artifact.fingerprint != fingerprint:
        raise CacheMismatchError(fingerprint, artifact.fingerprint)
    if not artifact.fully_embedded:
        raise CacheMismatchError(fingerprint, artifact.fingerprint, reason="artifact is not fully embedded")
    dimensions = artifact.embedding_dimensions
    if len(dimensions) != 1:
        raise CacheMismatchError(
            fingerprint,
            artifact.fingerprint,
            reason=f"inconsistent embedding dimensions {sorted(dimensions)}",
        )
    return artifact


class EmbeddingCacheManager(EmbeddingCache):
    """Infrastructure adapter for the JSON cache artifacts."""

    def __init__(self, prebuilt_path: str | Path | None, working_path: str | Path):
        self._prebuilt_path = Path(prebuilt_path) if prebuilt_path else None
        self._working_path = Path(working_path)

    @property
    def working_path(self) -> Path:
        return self._working_path

    def fingerprint(self, teams: Sequence[TeamRecord]) -> str:
        return compute_fingerprint(teams)

    async def load(self, fingerprint: str) -> CacheArtifact | None:
        """Return the first valid artifact (pre-built, then working), or None."""
        locations = [("pre-built", self._prebuilt_path), ("working", self._working_path)]
        for label, path in locations:
            if path is None or not path.exists():
                continue
            try:
                artifact = read_artifact(path, fingerprint)
            except CacheMismatchError as exc:
                logger.info("Ignoring %s cache %s: %s", label, path, exc)
                continue
            except (OSError, ValueError) as exc:
                logger.warning("Could not read %s cache %s: %s", label, path, exc)
                continue
            logger.info("Using %s cache %s (%d chunks)", label, path, len(artifact.chunks))
            return artifact
        return None

    async def save(self, fingerprint: str, chunks: Sequence[EmbeddedChunk]) -> None:
        """Write the working artifact; failures are logged, never raised."""
        try:
            size = write_artifact(self._working_path, fingerprint, chunks)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Failed to save embedding cache to %s: %s", self._working_path, exc)
            return
        logger.info(
            "Saved embedding cache (%d chunks, %d bytes) to %s",
            len(chunks),
            size,
            self._working_path,
        )
