"""
Pipeline stage value object.

Stages are not rows of their own: a job stores its ordered stage list as a
JSONB array. This module is the only place that converts between that
array and typed ``Stage`` records.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# Colour tags offered by the stage editor (label -> css class)
STAGE_COLORS: Dict[str, str] = {
    "Blue": "bg-blue-500",
    "Green": "bg-green-500",
    "Yellow": "bg-yellow-500",
    "Purple": "bg-purple-500",
    "Red": "bg-red-500",
    "Orange": "bg-orange-500",
    "Pink": "bg-pink-500",
    "Gray": "bg-gray-500",
}

DEFAULT_STAGE_COLOR = STAGE_COLORS["Gray"]
DEFAULT_STAGE_ID = "applied"
STAGE_TEXT_MAX_LENGTH = 100


class Stage(BaseModel):
    """One column of a job's pipeline."""
    id: str = Field(..., min_length=1, max_length=STAGE_TEXT_MAX_LENGTH)
    label: str = Field(..., min_length=1, max_length=STAGE_TEXT_MAX_LENGTH)
    color: str = DEFAULT_STAGE_COLOR

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "label": self.label, "color": self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Stage":
        return cls(
            id=str(data["id"]),
            label=str(data.get("label") or data["id"]),
            color=str(data.get("color") or DEFAULT_STAGE_COLOR),
        )


DEFAULT_STAGES: List[Stage] = [
    Stage(id="applied", label="Applied", color=STAGE_COLORS["Blue"]),
    Stage(id="screening", label="Screening", color=STAGE_COLORS["Yellow"]),
    Stage(id="interview", label="Interview", color=STAGE_COLORS["Purple"]),
    Stage(id="offer", label="Offer", color=STAGE_COLORS["Green"]),
    Stage(id="rejected", label="Rejected", color=STAGE_COLORS["Red"]),
]


def stages_to_json(stages: List[Stage]) -> List[Dict[str, str]]:
    """Serialize for the job.stages JSONB column."""
    return [stage.to_dict() for stage in stages]


def stages_from_json(raw: Optional[List[Dict[str, Any]]]) -> List[Stage]:
    """Deserialize the job.stages column; NULL becomes an empty list."""
    if not raw:
        return []
    return [Stage.from_dict(item) for item in raw]
