"""
Normalized game and team models — the stable internal shape.

Upstream records are mapped into these by ``ingestion.mapper``; snapshot files
and everything downstream only ever see these types. All models are frozen
(immutable) after construction: a fetch produces fresh values, nothing edits
them in place.

Persisted JSON uses camelCase keys (``homeTeam``, ``startTime``, ...). Models
accept either the camelCase alias or the Python field name on input.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class GameStatus(str, Enum):
    """Lifecycle state of a game."""

    SCHEDULED   = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    FINAL       = "FINAL"
    POSTPONED   = "POSTPONED"
    CANCELED    = "CANCELED"


class Team(BaseModel):
    """A team as it appears inside a game.

    Attributes:
        id:           Internal id, ``team-<upstream id>``.
        name:         Short name (e.g. ``"Celtics"``).
        full_name:    Full name (e.g. ``"Boston Celtics"``).
        abbreviation: Three-letter code.
        city:         Home city.
        conference:   ``"East"`` / ``"West"``.
        division:     Division name.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    full_name: str = Field(default="", alias="fullName")
    abbreviation: str = ""
    city: str = ""
    conference: str = ""
    division: str = ""


class Score(BaseModel):
    """Home and away points."""

    model_config = ConfigDict(frozen=True)

    home: int = 0
    away: int = 0


class GameMeta(BaseModel):
    """Provider metadata carried alongside a game.

    Attributes:
        season:           Season year as a decimal string (``"2023"``).
        upstream_game_id: The provider's numeric game id.
        period:           Current or final period number (0 before tip-off).
        postseason:       Whether the game is a playoff game.
        time:             Time-remaining text, trimmed; may be empty.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    season: str = ""
    upstream_game_id: int = Field(default=0, alias="upstreamGameId")
    period: int = 0
    postseason: bool = False
    time: str = ""


class Game(BaseModel):
    """The canonical game shape exposed by the service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    provider: str
    home_team: Team = Field(alias="homeTeam")
    away_team: Team = Field(alias="awayTeam")
    start_time: str = Field(default="", alias="startTime")
    status: GameStatus = GameStatus.SCHEDULED
    score: Score = Score()
    meta: GameMeta = GameMeta()
