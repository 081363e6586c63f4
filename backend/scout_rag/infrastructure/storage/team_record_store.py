"""Read-only store of precomputed team records — one JSON file per team.

Layout:
    <teams_dir>/<team_slug>.json

Files are enumerated in sorted name order. A file that cannot be parsed is
skipped with a warning; only an unreadable directory aborts loading.
"""

import json
import logging
from pathlib import Path

from scout_rag.application.interfaces.team_record_source import TeamRecordSource
from scout_rag.domain.entities.team_record import TeamRecord
from scout_rag.domain.exceptions import DataSourceError

logger = logging.getLogger(__name__)


class JsonTeamRecordStore(TeamRecordSource):
    """Infrastructure adapter for the precomputed teams directory."""

    def __init__(self, teams_dir: str | Path):
        self._teams_dir = Path(teams_dir)

    @property
    def teams_dir(self) -> Path:
        return self._teams_dir

    async def load_all(self) -> list[TeamRecord]:
        """Load every well-formed team file.

        Raises:
            DataSourceError: If the directory is missing or unreadable.
        """
        if not self._teams_dir.is_dir():
            raise DataSourceError(self._teams_dir, "team records directory not found")

        try:
            files = sorted(p for p in self._teams_dir.iterdir() if p.suffix == ".json")
        except OSError as exc:
            raise DataSourceError(self._teams_dir, f"cannot list directory: {exc}") from exc

        teams: list[TeamRecord] = []
        for path in files:
            try:
                teams.append(self._load_file(path))
            except DataSourceError as exc:
                logger.warning("Skipping team file %s: %s", path.name, exc.message)

        logger.info("Loaded %d teams from %s (%d files)", len(teams), self._teams_dir, len(files))
        return teams

    @staticmethod
    def _load_file(path: Path) -> TeamRecord:
        try:
            data = json.loads(path.read_text("utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DataSourceError(path, f"unreadable JSON: {exc}") from exc
        return TeamRecord.from_dict(data, origin=str(path))
