"""
Rainfall data models and type definitions.

This module provides the value types exchanged between the loader, the
statistics engine, the table view and the export layer.
"""

from dataclasses import asdict, dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class RainRecord:
    """One daily rainfall observation."""

    season: str
    year: int
    month: int
    day: int
    rain: float

    @property
    def date_label(self) -> str:
        """Date formatted as DD/MM/YYYY."""
        return f"{self.day:02d}/{self.month:02d}/{self.year}"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "RainRecord":
        return cls(
            season=str(data["season"]),
            year=int(data["year"]),
            month=int(data["month"]),
            day=int(data["day"]),
            rain=float(data["rain"]),
        )


@dataclass(frozen=True)
class SeasonTotal:
    """Total rainfall for one season."""

    season: str
    total_rain: float
    rain_days: int


@dataclass
class RainSummary:
    """Headline counts for the loaded row set."""

    record_count: int
    season_count: int
    max_rain: Optional[float]
    min_year: Optional[int]
    max_year: Optional[int]


@dataclass
class RainStatistics:
    """
    Extended statistics over the full row set.

    Fields that describe a typical completed season are ``None`` when no
    completed season exists.
    """

    current_season: Optional[str]
    completed_seasons: List[str] = field(default_factory=list)
    average_annual: Optional[float] = None
    average_per_rain_day: Optional[float] = None
    average_rain_days: Optional[float] = None
    wettest_season: Optional[SeasonTotal] = None
    driest_season: Optional[SeasonTotal] = None
    max_day: Optional[RainRecord] = None
