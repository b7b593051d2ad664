"""
Response mapper — balldontlie wire records to normalized domain models.

Pure and stateless: no I/O, no error cases for well-formed records. Ids are
derived only from the provider name and the upstream numeric id, so the same
upstream entity always maps to the same internal id.
"""

from __future__ import annotations

from typing import Iterable

from nba_data_service.ingestion.balldontlie_types import (
    PROVIDER_NAME,
    GameRecord,
    TeamRecord,
)
from nba_data_service.models.game import Game, GameMeta, GameStatus, Score, Team

_STATUS_MAP: dict[str, GameStatus] = {
    "final":         GameStatus.FINAL,
    "ended":         GameStatus.FINAL,
    "in progress":   GameStatus.IN_PROGRESS,
    "halftime":      GameStatus.IN_PROGRESS,
    "end of period": GameStatus.IN_PROGRESS,
    "postponed":     GameStatus.POSTPONED,
    "canceled":      GameStatus.CANCELED,
    "cancelled":     GameStatus.CANCELED,
}


def map_status(status: str) -> GameStatus:
    """Map upstream status text to a ``GameStatus``.

    Matching is case-insensitive. Anything unrecognized (including the
    tip-off timestamps the upstream sends for future games) is Scheduled.
    """
    return _STATUS_MAP.get((status or "").strip().lower(), GameStatus.SCHEDULED)


def format_season(season: int) -> str:
    return str(season)


def game_id(upstream_id: int, provider: str = PROVIDER_NAME) -> str:
    return f"{provider}-{upstream_id}"


def team_id(upstream_id: int) -> str:
    return f"team-{upstream_id}"


def map_team(record: TeamRecord) -> Team:
    return Team(
        id=team_id(record.id),
        name=record.name,
        full_name=record.full_name,
        abbreviation=record.abbreviation,
        city=record.city,
        conference=record.conference,
        division=record.division,
    )


def map_game(record: GameRecord, provider: str = PROVIDER_NAME) -> Game:
    """Map one upstream game record to a ``Game``.

    The visitor team becomes ``away_team``. Time-remaining text is trimmed;
    an empty result stays empty.
    """
    return Game(
        id=game_id(record.id, provider),
        provider=provider,
        home_team=map_team(record.home_team),
        away_team=map_team(record.visitor_team),
        start_time=record.date,
        status=map_status(record.status),
        score=Score(home=record.home_team_score, away=record.visitor_team_score),
        meta=GameMeta(
            season=format_season(record.season),
            upstream_game_id=record.id,
            period=record.period,
            postseason=record.postseason,
            time=record.time.strip(),
        ),
    )


def map_games(records: Iterable[GameRecord], provider: str = PROVIDER_NAME) -> list[Game]:
    """Map records in order; no sorting or de-duplication."""
    return [map_game(r, provider) for r in records]
