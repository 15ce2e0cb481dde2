from __future__ import annotations
import datetime as dt
from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=64)
    first_name: str = Field(default="", max_length=120)
    last_name: str = Field(default="", max_length=120)
    # Omitted team / gender keep whatever is already stored
    team: str | None = Field(default=None, max_length=120)
    gender: str | None = Field(default=None, max_length=16)


class ProfilePublic(BaseModel):
    user_id: str
    first_name: str
    last_name: str
    name: str
    team: str | None = None
    gender: str | None = None


class WeightEntry(BaseModel):
    date: dt.date
    weight: float = Field(gt=0, lt=500, description="kilograms")
