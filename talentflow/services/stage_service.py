"""
Per-job pipeline stage editing.

Pure functions over ``List[Stage]``. Every edit returns a new list; callers
persist the result on the job through ``JobService``.
"""

import re
from typing import Iterable, List, Optional

from talentflow.schemas.stage import (
    DEFAULT_STAGE_COLOR,
    DEFAULT_STAGES,
    STAGE_COLORS,
    STAGE_TEXT_MAX_LENGTH,
    Stage,
)
from talentflow.services.exceptions import ValidationError

_WHITESPACE = re.compile(r"\s+")


def effective_stages(stages: Optional[Iterable[Stage]]) -> List[Stage]:
    """Return the job's own stages, or a copy of the default pipeline."""
    own = list(stages or [])
    if own:
        return own
    return [stage.model_copy() for stage in DEFAULT_STAGES]


def slugify_stage_id(label: str) -> str:
    """'Technical Interview' -> 'technical-interview'."""
    slug = _WHITESPACE.sub("-", (label or "").strip().lower())
    if not slug:
        raise ValidationError("Stage name must not be empty")
    return slug


def _unique_id(base: str, taken: set) -> str:
    if base not in taken:
        return base
    suffix = 2
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"


def _check_index(stages: List[Stage], index: int) -> None:
    if index < 0 or index >= len(stages):
        raise ValidationError(
            f"Stage index {index} out of range",
            {"index": index, "stage_count": len(stages)},
        )


def _check_color(color: str) -> None:
    if color not in STAGE_COLORS.values():
        raise ValidationError(
            f"Unknown stage color '{color}'",
            {"allowed": sorted(STAGE_COLORS.values())},
        )


def _check_text_length(field: str, value: str) -> None:
    if len(value) > STAGE_TEXT_MAX_LENGTH:
        raise ValidationError(
            f"Stage {field} must be at most {STAGE_TEXT_MAX_LENGTH} characters",
            {field: value[:STAGE_TEXT_MAX_LENGTH], "length": len(value)},
        )


def _build_stage(stage_id: str, label: str, color: str) -> Stage:
    """Construct a validated Stage, raising the service ValidationError."""
    _check_text_length("name", label)
    _check_text_length("id", stage_id)
    return Stage(id=stage_id, label=label, color=color)


def add_stage(stages: List[Stage], label: str, color: str = DEFAULT_STAGE_COLOR) -> List[Stage]:
    """Append a stage; the id is slugified from the label and suffixed on collision."""
    label = (label or "").strip()
    base = slugify_stage_id(label)
    _check_color(color)
    taken = {stage.id for stage in stages}
    new_stage = _build_stage(_unique_id(base, taken), label, color)
    return [*stages, new_stage]


def remove_stage(stages: List[Stage], index: int) -> List[Stage]:
    _check_index(stages, index)
    return [stage for i, stage in enumerate(stages) if i != index]


def relabel_stage(stages: List[Stage], index: int, label: str) -> List[Stage]:
    """Change the display name only; the id stays stable for existing candidates."""
    _check_index(stages, index)
    label = (label or "").strip()
    if not label:
        raise ValidationError("Stage name must not be empty")
    result = [stage.model_copy() for stage in stages]
    current = result[index]
    result[index] = _build_stage(current.id, label, current.color)
    return result


def recolor_stage(stages: List[Stage], index: int, color: str) -> List[Stage]:
    _check_index(stages, index)
    _check_color(color)
    result = [stage.model_copy() for stage in stages]
    current = result[index]
    result[index] = _build_stage(current.id, current.label, color)
    return result


def validate_stage_list(stages: List[Stage]) -> List[Stage]:
    """Reject duplicate or blank ids in a submitted stage list."""
    seen = set()
    duplicates = []
    for stage in stages:
        if not stage.id.strip():
            raise ValidationError("Stage id must not be empty")
        if stage.id in seen:
            duplicates.append(stage.id)
        seen.add(stage.id)
    if duplicates:
        raise ValidationError(
            "Stage ids must be unique within a job",
            {"duplicates": sorted(set(duplicates))},
        )
    return stages


def resolve_display_stage(stages: Optional[Iterable[Stage]], stage_id: Optional[str]) -> Stage:
    """
    Find the stage a candidate should be shown in.

    A candidate can point at a stage that was removed from the job after
    they were moved there; in that case the first stage of the pipeline
    is shown instead.
    """
    pipeline = effective_stages(stages)
    for stage in pipeline:
        if stage.id == stage_id:
            return stage
    return pipeline[0]
