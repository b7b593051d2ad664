"""
Wire shapes of the balldontlie ``/games`` endpoint.

Only the fields the mapper reads are declared; anything else in the payload is
ignored. Missing or ``null`` fields fall back to zero values so a sparse but
well-formed record still maps, while a body of the wrong structure (e.g.
``data`` not a list) fails validation and is reported as a decode failure by
the client.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

PROVIDER_NAME = "balldontlie"


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # The upstream sends null for unset scalars (e.g. "time" before tip-off)
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class TeamRecord(_WireModel):
    """A team object nested in a game record."""

    id: int = 0
    abbreviation: str = ""
    city: str = ""
    conference: str = ""
    division: str = ""
    full_name: str = ""
    name: str = ""


class GameRecord(_WireModel):
    """One entry of the ``data`` array."""

    id: int = 0
    date: str = ""
    status: str = ""
    time: str = ""
    period: int = 0
    postseason: bool = False
    home_team: TeamRecord = TeamRecord()
    visitor_team: TeamRecord = TeamRecord()
    home_team_score: int = 0
    visitor_team_score: int = 0
    season: int = 0


class PageMeta(_WireModel):
    """Pagination block; ``total_pages`` is 0 when the upstream omits it."""

    total_pages: int = 0


class GamesPage(_WireModel):
    """A full ``/games`` response body."""

    data: list[GameRecord] = Field(default_factory=list)
    meta: PageMeta = PageMeta()
