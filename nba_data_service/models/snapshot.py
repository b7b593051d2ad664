"""
Day-keyed games snapshot — the payload of one ``games/{date}.json`` file.

The date is embedded redundantly inside the payload so a file remains
self-describing when copied or served without its filename.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict

from nba_data_service.models.game import Game


class GamesSnapshot(BaseModel):
    """Games for one calendar date, in upstream order.

    Attributes:
        date:  ``YYYY-MM-DD`` key; may be empty until the writer fills it in.
        games: Ordered games for that date.
    """

    model_config = ConfigDict(frozen=True)

    date: str = ""
    games: list[Game] = []

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready dict written to disk (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        """Serialize as pretty-printed JSON (2-space indent)."""
        return json.dumps(self.to_payload(), indent=2, ensure_ascii=False)

    def with_date(self, date: str) -> "GamesSnapshot":
        """Return this snapshot with ``date`` filled in if it was empty."""
        if self.date:
            return self
        return self.model_copy(update={"date": date})
