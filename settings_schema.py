from typing import Literal, Optional
from pydantic import BaseModel, Field, ValidationError


class SettingsSchema(BaseModel):
    weight_unit: Literal["kg", "lbs"] = "kg"
    display_weight_unit: Optional[Literal["kg", "lbs"]] = None
    window_weeks: int = Field(default=8, ge=1, le=52)
    tracked_exercise: Optional[str] = None
    db_path: str = "squad.db"


def validate_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
