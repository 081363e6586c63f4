"""Team chunker — turns one team's statistics and insights into retrieval passages.

Chunks are emitted in a fixed order:
1. Team overview (win rates, first duels, trade efficiency, round types, sites)
2. Map win-rate table
3. One chunk per map in ``map_detailed``
4. Player tendencies
5. Agent composition + role distribution
6. Combat metrics (top clutch and multi-kill players)
7. Opponent record
8. One chunk per scouting insight section

Numbers are rendered exactly as they appear in the source data. Lines whose
source field is missing are left out rather than filled with placeholders.
"""

import logging
from typing import Any

from scout_rag.domain.entities.chunk import Chunk
from scout_rag.domain.entities.team_record import TeamRecord

logger = logging.getLogger(__name__)

# Fixed policy, not configurable.
_TOP_PERFORMERS = 3


def _has(mapping: Any, key: str) -> bool:
    return isinstance(mapping, dict) and mapping.get(key) is not None


def _section(mapping: dict[str, Any], key: str) -> dict[str, Any]:
    """Return ``mapping[key]`` when it is a non-empty object, else an empty dict."""
    value = mapping.get(key)
    return value if isinstance(value, dict) else {}


def _rows(mapping: dict[str, Any], key: str) -> list[dict[str, Any]]:
    value = mapping.get(key)
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, dict)]


def _rate_with_rounds(label: str, stats: dict[str, Any], rate_key: str, rounds_key: str) -> str | None:
    """``"{label}: {rate}% ({rounds} rounds)"``, dropping the parenthetical if rounds are missing."""
    if not _has(stats, rate_key):
        return None
    line = f"{label}: {stats[rate_key]}%"
    if _has(stats, rounds_key):
        line += f" ({stats[rounds_key]} rounds)"
    return line


def _join_parts(parts: list[str | None], sep: str = ", ") -> str:
    return sep.join(p for p in parts if p)


def _block(header: str, lines: list[str]) -> str | None:
    """Header plus lines, newline-terminated; None when there is nothing to say."""
    if not lines:
        return None
    return header + "\n" + "".join(f"{line}\n" for line in lines)


class TeamChunker:
    """Deterministic, I/O-free conversion of a TeamRecord into Chunks."""

    def chunk(self, team: TeamRecord) -> list[Chunk]:
        """Chunk a single team. A team with no metrics and no insights yields []."""
        name = team.team_name
        texts: list[str | None] = []

        metrics = team.metrics or {}
        if metrics:
            texts.append(self._overview(name, metrics))
            texts.append(self._map_win_rates(name, metrics))
            texts.extend(self._map_details(name, metrics))
            texts.append(self._players(name, metrics))
            texts.append(self._agents(name, metrics))
            texts.append(self._combat(name, metrics))
            texts.append(self._opponents(name, metrics))

        texts.extend(self._insights(name, team.insights or {}))

        chunks = [Chunk(text=t, source=name) for t in texts if t]
        logger.debug("Chunked team %s into %d chunks", name, len(chunks))
        return chunks

    def chunk_all(self, teams: list[TeamRecord]) -> list[Chunk]:
        """Chunk a batch of teams, preserving team order."""
        chunks: list[Chunk] = []
        for team in teams:
            chunks.extend(self.chunk(team))
        logger.info("Created %d text chunks from %d teams", len(chunks), len(teams))
        return chunks

    # ── Structured sections ─────────────────────────────────────────

    def _overview(self, name: str, m: dict[str, Any]) -> str | None:
        lines: list[str] = []

        if _has(m, "win_rate"):
            lines.append(f"Overall Win Rate: {m['win_rate']}%")

        side = _section(m, "side_metrics")
        for line in (
            _rate_with_rounds("Attack Win Rate", side, "attack_win_rate", "attack_rounds"),
            _rate_with_rounds("Defense Win Rate", side, "defense_win_rate", "defense_rounds"),
        ):
            if line:
                lines.append(line)
        kd = _join_parts([
            f"Attack K/D: {side['attack_kd']}" if _has(side, "attack_kd") else None,
            f"Defense K/D: {side['defense_kd']}" if _has(side, "defense_kd") else None,
        ])
        if kd:
            lines.append(kd)

        duel = _section(m, "first_duel")
        if _has(duel, "team_first_kill_rate"):
            lines.append(f"First Kill Rate: {duel['team_first_kill_rate']}%")
        if _has(duel, "first_kill_conversion_rate"):
            lines.append(f"First Kill Conversion: {duel['first_kill_conversion_rate']}%")

        combat = _section(m, "combat_metrics")
        if _has(combat, "trade_efficiency"):
            lines.append(f"Trade Efficiency: {combat['trade_efficiency']}%")

        rounds = _section(m, "round_type_performance")
        for key, label in (("pistol", "Pistol"), ("eco", "Eco"), ("full_buy", "Full Buy")):
            perf = _section(rounds, key)
            if _has(perf, "win_rate"):
                lines.append(f"{label} Win Rate: {perf['win_rate']}%")

        sites = _section(m, "site_preferences")
        if sites:
            prefs = ", ".join(f"{site}-Site {pct}%" for site, pct in sites.items())
            lines.append(f"Site Preferences: {prefs}")

        return _block(f"{name} Team Overview:", lines)

    def _map_win_rates(self, name: str, m: dict[str, Any]) -> str | None:
        by_map = _section(m, "win_rate_by_map")
        return _block(
            f"{name} Map Win Rates:",
            [f"{map_name}: {wr}%" for map_name, wr in by_map.items()],
        )

    def _map_details(self, name: str, m: dict[str, Any]) -> list[str | None]:
        chunks: list[str | None] = []
        for map_name, stats in _section(m, "map_detailed").items():
            if not isinstance(stats, dict):
                continue
            lines: list[str] = []
            overall = _join_parts([
                f"Rounds Played: {stats['rounds_played']}" if _has(stats, "rounds_played") else None,
                f"Win Rate: {stats['win_rate']}%" if _has(stats, "win_rate") else None,
            ])
            if overall:
                lines.append(overall)
            for line in (
                _rate_with_rounds("Attack", stats, "attack_win_rate", "attack_rounds"),
                _rate_with_rounds("Defense", stats, "defense_win_rate", "defense_rounds"),
            ):
                if line:
                    lines.append(line)
            if _has(stats, "top_agent"):
                lines.append(f"Top Agent: {stats['top_agent']}")
            chunks.append(_block(f"{name} on {map_name}:", lines))
        return chunks

    def _players(self, name: str, m: dict[str, Any]) -> str | None:
        lines: list[str] = []
        for p in _rows(m, "player_tendencies"):
            if not _has(p, "player"):
                continue
            top_agent = None
            if _has(p, "top_agent"):
                top_agent = f"Top Agent {p['top_agent']}"
                if _has(p, "top_agent_rate"):
                    top_agent += f" ({p['top_agent_rate']}%)"
            details = _join_parts([
                f"KD {p['kd_ratio']}" if _has(p, "kd_ratio") else None,
                f"Avg Kills {p['avg_kills']}" if _has(p, "avg_kills") else None,
                top_agent,
                f"First Kill Rate {p['first_kill_rate']}%" if _has(p, "first_kill_rate") else None,
            ])
            lines.append(f"{p['player']}: {details}" if details else str(p["player"]))
        return _block(f"{name} Player Stats:", lines)

    def _agents(self, name: str, m: dict[str, Any]) -> str | None:
        lines: list[str] = []
        for a in _rows(m, "agent_composition"):
            if not _has(a, "agent"):
                continue
            line = f"{a['agent']}:"
            if _has(a, "pick_rate"):
                line += f" {a['pick_rate']}% pick rate"
            if _has(a, "pick_count"):
                line += f" ({a['pick_count']} picks)"
            lines.append(line)

        roles = _section(m, "role_distribution")
        if roles:
            dist = ", ".join(f"{role} {pct}%" for role, pct in roles.items())
            lines.append(f"Role Distribution: {dist}")

        return _block(f"{name} Agent Composition:", lines)

    def _combat(self, name: str, m: dict[str, Any]) -> str | None:
        combat = _section(m, "combat_metrics")
        if not combat:
            return None

        lines: list[str] = []
        if _has(combat, "trade_efficiency"):
            lines.append(f"Trade Efficiency: {combat['trade_efficiency']}%")
        if _has(combat, "total_kills_analyzed"):
            lines.append(f"Total Kills Analyzed: {combat['total_kills_analyzed']}")

        clutchers = [c for c in _rows(combat, "clutch_performers") if _has(c, "player")]
        if clutchers:
            lines.append("Top Clutch Players:")
            for c in clutchers[:_TOP_PERFORMERS]:
                line = f"  {c['player']}:"
                if _has(c, "clutches_won") and _has(c, "clutches_faced"):
                    line += f" {c['clutches_won']}/{c['clutches_faced']} clutches"
                if _has(c, "clutch_rate"):
                    line += f" ({c['clutch_rate']}%)"
                lines.append(line)

        killers = [k for k in _rows(combat, "multi_killers") if _has(k, "player")]
        if killers:
            lines.append("Top Multi-Kill Players:")
            for k in killers[:_TOP_PERFORMERS]:
                line = f"  {k['player']}:"
                if _has(k, "total"):
                    line += f" {k['total']} multi-kills"
                breakdown = _join_parts([
                    f"{label}: {k[key]}" if _has(k, key) else None
                    for key, label in (("2k", "2K"), ("3k", "3K"), ("4k", "4K"))
                ])
                if breakdown:
                    line += f" ({breakdown})"
                lines.append(line)

        return _block(f"{name} Combat Metrics:", lines)

    def _opponents(self, name: str, m: dict[str, Any]) -> str | None:
        lines: list[str] = []
        for o in _rows(m, "opponent_stats"):
            if not _has(o, "opponent"):
                continue
            line = f"vs {o['opponent']}:"
            if _has(o, "win_rate"):
                line += f" {o['win_rate']}% win rate"
            record = _join_parts([
                f"{o['matches']} matches" if _has(o, "matches") else None,
                f"{o['rounds_played']} rounds" if _has(o, "rounds_played") else None,
            ])
            if record:
                line += f" ({record})"
            lines.append(line)
        return _block(f"{name} Opponent Record:", lines)

    # ── Free-text insights ──────────────────────────────────────────

    def _insights(self, name: str, insights: dict[str, Any]) -> list[str]:
        chunks: list[str] = []
        for section, content in insights.items():
            if isinstance(content, str) and content.strip():
                chunks.append(f"{name} {section} Scouting Report:\n{content}")
        return chunks
