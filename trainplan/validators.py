"""Pydantic validation models for caller-supplied plan settings."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from trainplan.services.methodology_tables import METHODOLOGIES
from trainplan.services.paces import LT_PACE_MAX, LT_PACE_MIN, VDOT_MAX, VDOT_MIN
from trainplan.services.plan_model import IntensityDistribution, PlanConfig, Segment
from trainplan.services.zones import TRAINING_ZONES


class PlanConfigInput(BaseModel):
    name: str = Field(min_length=1, max_length=140)
    goal: str = Field(min_length=1, max_length=140)
    start_date: date
    methodology: str = "daniels"
    target_date: Optional[date] = None
    end_date: Optional[date] = None
    race_distance: Optional[str] = None
    vdot: Optional[float] = Field(default=None, ge=VDOT_MIN, le=VDOT_MAX)
    lactate_threshold_pace: Optional[float] = Field(default=None, ge=LT_PACE_MIN, le=LT_PACE_MAX)
    weekly_mileage: float = Field(default=0, ge=0)
    longest_recent_run: float = Field(default=0, ge=0)

    @field_validator("methodology")
    @classmethod
    def registered_methodology(cls, v):
        if v not in METHODOLOGIES:
            raise ValueError(f"methodology must be one of {list(METHODOLOGIES)}")
        return v

    @field_validator("race_distance")
    @classmethod
    def valid_race_distance(cls, v):
        allowed = {"5k", "10k", "half_marathon", "marathon"}
        if v is not None and v not in allowed:
            raise ValueError(f"race_distance must be one of {sorted(allowed)}")
        return v

    @model_validator(mode="after")
    def dates_in_order(self):
        for label, value in (("target_date", self.target_date), ("end_date", self.end_date)):
            if value is not None and value < self.start_date:
                raise ValueError(f"{label} must not be before start_date")
        return self

    def to_plan_config(self) -> PlanConfig:
        return PlanConfig(**self.model_dump())


class DistributionInput(BaseModel):
    easy: float = Field(ge=0, le=100)
    moderate: float = Field(ge=0, le=100)
    hard: float = Field(ge=0, le=100)

    @model_validator(mode="after")
    def sums_to_hundred(self):
        total = self.easy + self.moderate + self.hard
        if abs(total - 100) > 1:
            raise ValueError(f"distribution must sum to 100 (got {total})")
        return self

    def to_distribution(self) -> IntensityDistribution:
        return IntensityDistribution(self.easy, self.moderate, self.hard)


class SegmentInput(BaseModel):
    duration: float = Field(gt=0, le=600)
    intensity: float = Field(ge=0, le=100)
    zone: str
    description: str = Field(default="", max_length=500)

    @field_validator("zone")
    @classmethod
    def known_zone(cls, v):
        if v not in TRAINING_ZONES:
            raise ValueError(f"zone must be one of {sorted(TRAINING_ZONES)}")
        return v

    def to_segment(self) -> Segment:
        return Segment(self.duration, self.intensity, self.zone, self.description)
