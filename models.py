from typing import Dict, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

ROLES = ("Player", "Coach")
POSITIONS = ("Forward", "Back")


class Player(BaseModel):
    """A registered squad member."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    role: Literal["Player", "Coach"] = "Player"
    position: Optional[Literal["Forward", "Back"]] = None

    @property
    def is_player(self) -> bool:
        return self.role == "Player"


class WorkoutLog(BaseModel):
    """One player's entry for one program day in one ISO week.

    ``timestamp`` is epoch milliseconds. ``week_number`` is a legacy field
    kept only so older documents still parse.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    player_id: str = Field(alias="playerId")
    day_id: str = Field(alias="dayId")
    timestamp: Optional[float] = Field(default=None, allow_inf_nan=False)
    week_number: Optional[int] = Field(default=None, alias="weekNumber")
    week_year: Optional[int] = Field(default=None, alias="weekYear")
    week: Optional[int] = None
    data: Dict[str, str] = Field(default_factory=dict)
    completed: bool = False
    custom_workout: Optional[str] = Field(default=None, alias="customWorkout")

    @property
    def has_data(self) -> bool:
        return bool(self.data)

    @property
    def document_key(self) -> str:
        """Storage key; at most one log is kept per key."""
        if self.week_year is not None and self.week is not None:
            return f"{self.player_id}_{self.day_id}_{self.week_year}-W{self.week}"
        if self.week_number is not None:
            return f"{self.player_id}_{self.day_id}_week{self.week_number}"
        return f"{self.player_id}_{self.day_id}"

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
