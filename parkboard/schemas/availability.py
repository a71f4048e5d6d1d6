from __future__ import annotations

from datetime import date, datetime, time

from pydantic import AwareDatetime, BaseModel, Field, model_validator


class AvailabilityWindowCreate(BaseModel):
    day_of_week: list[int] = Field(default_factory=list)  # 0 = Sunday
    available_from: date | None = None
    available_until: date | None = None
    start_time: time | None = None
    end_time: time | None = None

    @model_validator(mode="after")
    def _check(self):
        if any(d < 0 or d > 6 for d in self.day_of_week):
            raise ValueError("day_of_week values must be between 0 and 6")
        if (self.available_from is None) != (self.available_until is None):
            raise ValueError("available_from and available_until must be given together")
        if not self.day_of_week and self.available_from is None:
            raise ValueError("Either day_of_week or a date range is required")
        if self.available_from and self.available_until and self.available_from > self.available_until:
            raise ValueError("Invalid date range")
        end_is_midnight = self.end_time is None or self.end_time == time(0)
        if self.start_time and not end_is_midnight and self.start_time >= self.end_time:
            raise ValueError("Invalid time range")
        return self


class AvailabilityWindowOut(BaseModel):
    id: str
    slot_id: str
    day_of_week: list[int]
    available_from: date | None
    available_until: date | None
    start_time: time | None
    end_time: time | None

    class Config:
        from_attributes = True


class BlackoutCreate(BaseModel):
    blackout_start: AwareDatetime
    blackout_end: AwareDatetime
    reason: str = Field(default="", max_length=255)


class BlackoutOut(BaseModel):
    id: str
    slot_id: str
    blackout_start: datetime
    blackout_end: datetime
    reason: str

    class Config:
        from_attributes = True


class AvailabilityCheckOut(BaseModel):
    slot_id: str
    start_time: datetime
    end_time: datetime
    available: bool


class WindowHours(BaseModel):
    start_time: time | None
    end_time: time | None


class AvailabilityDay(BaseModel):
    date: date
    blackout: bool
    quick_available: bool
    open_all_day: bool
    windows: list[WindowHours]


class AvailabilityCalendar(BaseModel):
    slot_id: str
    days: list[AvailabilityDay]
