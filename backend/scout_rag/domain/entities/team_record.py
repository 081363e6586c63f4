"""Domain entity for per-team scouting data produced by the match analysis pipeline."""

from dataclasses import dataclass, field
from typing import Any

from scout_rag.domain.exceptions import DataSourceError


@dataclass(frozen=True)
class TeamRecord:
    """Precomputed statistics and scouting insights for one team.

    ``metrics`` is the analysis pipeline's structured statistics object and is
    read key-by-key by the chunker; ``insights`` maps a section name
    (e.g. "Economy") to free-text commentary.
    """

    team_name: str
    matches_analyzed: int = 0
    metrics: dict[str, Any] = field(default_factory=dict)
    insights: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, origin: str = "<memory>") -> "TeamRecord":
        """Build a TeamRecord from a decoded JSON document.

        Raises DataSourceError when the payload is not an object or has no
        usable ``team_name``.
        """
        if not isinstance(data, dict):
            raise DataSourceError(origin, f"expected a JSON object, got {type(data).__name__}")

        team_name = data.get("team_name")
        if not isinstance(team_name, str) or not team_name.strip():
            raise DataSourceError(origin, "missing 'team_name'")

        matches = data.get("matches_analyzed", 0)
        if isinstance(matches, bool) or not isinstance(matches, (int, float)):
            raise DataSourceError(origin, f"invalid 'matches_analyzed': {matches!r}")
        if isinstance(matches, float) and not matches.is_integer():
            raise DataSourceError(origin, f"'matches_analyzed' must be a whole number, got {matches!r}")

        metrics = data.get("metrics") or {}
        if not isinstance(metrics, dict):
            raise DataSourceError(origin, "'metrics' must be an object")

        insights = data.get("insights") or {}
        if not isinstance(insights, dict):
            raise DataSourceError(origin, "'insights' must be an object")

        return cls(
            team_name=team_name,
            matches_analyzed=int(matches),
            metrics=metrics,
            insights=insights,
        )
