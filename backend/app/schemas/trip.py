from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from app.config import settings
from app.services.budget_engine import normalize_budget

TravelStyle = Literal["budget", "mid", "luxury"]


class TripRequest(BaseModel):
    """One itinerary request. Immutable for the duration of a generation."""

    destination: str = Field(..., min_length=1, max_length=120)
    start_date: date | None = None
    end_date: date | None = None
    adults: int = Field(2, ge=1, le=20)
    children: int = Field(0, ge=0, le=20)
    budget: float = Field(0, ge=0)
    currency: str = "USD"
    style: TravelStyle = "mid"
    preferences: list[str] = Field(default_factory=list)
    dietary: list[str] = Field(default_factory=list)
    purpose: str = "leisure"
    activities: str = ""

    model_config = {"frozen": True}

    @field_validator("destination")
    @classmethod
    def _strip_destination(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("destination must not be blank")
        return v

    @field_validator("budget", mode="before")
    @classmethod
    def _parse_budget(cls, v):
        return normalize_budget(v)

    @field_validator("style", mode="before")
    @classmethod
    def _normalize_style(cls, v):
        v = (v or "mid").strip().lower() if isinstance(v, str) else v
        return {"moderate": "mid", "medium": "mid", "standard": "mid", "cheap": "budget", "premium": "luxury"}.get(v, v)

    @field_validator("preferences", "dietary", mode="before")
    @classmethod
    def _split_list(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @model_validator(mode="after")
    def _check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    @computed_field
    @property
    def days(self) -> int:
        if self.start_date and self.end_date:
            return (self.end_date - self.start_date).days + 1
        return settings.default_trip_days

    @computed_field
    @property
    def travelers(self) -> int:
        return self.adults + self.children


class BudgetRequest(BaseModel):
    total: float = 0
    days: int = Field(1, ge=1, le=60)
    style: str = "mid"
    travelers: int = Field(2, ge=1, le=40)
    destination: str = ""
    purpose: str | None = None

    @field_validator("total", mode="before")
    @classmethod
    def _parse_total(cls, v):
        return normalize_budget(v)


class AdviseRequest(BaseModel):
    destination: str = Field(..., min_length=1)
    activity_type: str = "activities"
    date: date
    time_slot: str | None = None
    group_size: int = Field(2, ge=1, le=100)


class AdvisoryResponse(BaseModel):
    warnings: list[str]
    opportunities: list[str]
    recommendations: list[str]
    priority: str
    urgency: str


class PlanResponse(BaseModel):
    id: str | None
    destination: str
    mode: str
    provenance: str
    failure: str | None
    generic_matches: list[str] = []
    html: str
    markdown: str
    elapsed_ms: int
    attempts: int
    budget: dict
    advisories: list[str]
    weather: dict | None = None
    created_at: datetime
