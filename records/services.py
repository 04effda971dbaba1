from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from django.db.models import Avg, Count, Max, QuerySet

from .models import Record


@dataclass(frozen=True)
class LeaderboardEntry:
    city: str
    country: str
    wellbeing_score: float
    air_quality_score: float
    temperature_score: float
    population_score: float
    record_count: int
    last_updated: datetime
    population: int


@dataclass(frozen=True)
class Page:
    records: list[Record]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _round1(value: float | None) -> float:
    return round(float(value or 0.0), 1)


def build_leaderboard(
    *, limit: int = 20, min_records: int = 1
) -> list[LeaderboardEntry]:
    """Rank cities by their average stored wellbeing score."""

    rows = (
        Record.objects.values("city", "country")
        .annotate(
            avg_total=Avg("total_score"),
            avg_air=Avg("air_score"),
            avg_temperature=Avg("temperature_score"),
            avg_population=Avg("population_score"),
            record_count=Count("id"),
            last_updated=Max("created_at"),
            max_population=Max("population"),
        )
        .filter(record_count__gte=min_records)
        .order_by("-avg_total", "city", "country")[:limit]
    )
    return [
        LeaderboardEntry(
            city=row["city"],
            country=row["country"],
            wellbeing_score=_round1(row["avg_total"]),
            air_quality_score=_round1(row["avg_air"]),
            temperature_score=_round1(row["avg_temperature"]),
            population_score=_round1(row["avg_population"]),
            record_count=int(row["record_count"]),
            last_updated=row["last_updated"],
            population=int(row["max_population"] or 0),
        )
        for row in rows
    ]


def paginate_records(
    queryset: QuerySet[Record],
    *,
    city: str | None = None,
    country: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = 10,
) -> Page:
    if city:
        queryset = queryset.filter(city__icontains=city)
    if country:
        queryset = queryset.filter(country__icontains=country)

    ordering = f"-{sort_by}" if sort_order == "desc" else sort_by
    total = queryset.count()
    offset = (page - 1) * limit
    records = list(queryset.order_by(ordering, "-id")[offset : offset + limit])
    return Page(records=records, total=total, page=page, limit=limit)
