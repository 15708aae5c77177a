"""Strict schema baselines with forbidden extras by default."""

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Neutral strict base for response DTOs."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class StrictRequestModel(StrictModel):
    """Request DTO base that forbids unexpected fields and accepts field names or aliases."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, populate_by_name=True)
