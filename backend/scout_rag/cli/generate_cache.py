"""Generate the pre-built embedding cache from the precomputed team records.

Runs the FIXED build recipe end to end (load → chunk → split → embed) and
writes the artifact the live service loads before falling back to its own
working cache. Commit the output next to the team data so a cold start
does not have to embed the whole corpus.

Usage:
    scout-rag-generate-cache
    python -m scout_rag.cli.generate_cache --teams-dir data/teams --output data/rag-cache.json
"""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path

from scout_rag.application.services.knowledge_base import CorpusBuilder
from scout_rag.application.services.text_splitter import SplitStrategy
from scout_rag.config import get_settings
from scout_rag.domain.exceptions import DataSourceError, ProviderError
from scout_rag.infrastructure.cache import compute_fingerprint, write_artifact
from scout_rag.infrastructure.dependencies import build_embedding_provider
from scout_rag.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage
from scout_rag.infrastructure.logging.log_config import setup_logging
from scout_rag.infrastructure.storage.team_record_store import JsonTeamRecordStore

logger = logging.getLogger(__name__)
log = PipelineLogger(__name__)


async def generate(teams_dir: Path, output: Path, api_key: str) -> int:
    """Build and write the cache artifact; returns the process exit code."""
    start = time.perf_counter()
    log.separator("Generating embedding cache")

    try:
        with log.timed_step(PipelineStage.LOAD, "Loading team records", teams_dir=teams_dir):
            teams = await JsonTeamRecordStore(teams_dir).load_all()
    except DataSourceError:
        return 1
    if not teams:
        logger.warning("No team files in %s; writing an empty cache", teams_dir)

    builder = CorpusBuilder(build_embedding_provider(api_key), split_strategy=SplitStrategy.FIXED)

    with log.timed_step(PipelineStage.CHUNK, f"Chunking and splitting {len(teams)} teams"):
        chunks = await builder.prepare_chunks(teams)
    log.detail(f"{len(chunks)} text chunks ready to embed")

    try:
        with log.timed_step(PipelineStage.EMBED, f"Embedding {len(chunks)} chunks"):
            embedded = await builder.embed_chunks(chunks)
    except ProviderError:
        return 1

    fingerprint = compute_fingerprint(teams)
    with log.timed_step(PipelineStage.CACHE, "Writing cache artifact", path=output):
        size = write_artifact(output, fingerprint, embedded)

    elapsed = time.perf_counter() - start
    log.step_complete(PipelineStage.COMPLETE, f"Cache saved to {output}")
    print(f"   {len(embedded)} chunks | {size / 1024 / 1024:.1f} MB | {elapsed:.1f}s")
    print(f"   Hash: {fingerprint}")
    return 0


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    setup_logging(stream=sys.stdout, plain=True)

    parser = argparse.ArgumentParser(description="Generate the pre-built embedding cache")
    parser.add_argument("--teams-dir", default=settings.teams_dir, help="Directory of team JSON files")
    parser.add_argument("--output", default=settings.prebuilt_cache_file, help="Cache artifact path")
    parser.add_argument("--api-key", default=None, help="Jina API key (defaults to JINA_API_KEY)")
    args = parser.parse_args(argv)

    api_key = (args.api_key or settings.jina_api_key).strip()
    if not api_key:
        log.step_error(PipelineStage.ERROR, "JINA_API_KEY not found in environment or .env")
        return 1

    teams_dir = Path(args.teams_dir)
    if not teams_dir.is_dir():
        log.step_error(PipelineStage.ERROR, f"Team data directory not found: {teams_dir}")
        return 1

    return asyncio.run(generate(teams_dir, Path(args.output), api_key))


if __name__ == "__main__":
    sys.exit(main())
