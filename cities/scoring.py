"""Wellbeing score computation.

The score blends three sub-scores with fixed weights:

* air quality (40%) from PM2.5, stepped against the WHO guideline context;
* temperature comfort (30%), a linear penalty around 22.5 C;
* population (30%), preferring density over raw population.

Each sub-score is rounded to an integer before weighting and the weighted
total is rounded again. Missing inputs map to a neutral 50.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from .engines.types import AggregatedCityRecord

AIR_WEIGHT: Final[float] = 0.4
TEMPERATURE_WEIGHT: Final[float] = 0.3
POPULATION_WEIGHT: Final[float] = 0.3

NEUTRAL_SCORE: Final[int] = 50
IDEAL_TEMPERATURE_C: Final[float] = 22.5
TEMPERATURE_PENALTY_PER_DEGREE: Final[float] = 3.0

# (upper bound inclusive, score), ascending
PM25_STEPS: Final[Sequence[tuple[float, int]]] = (
    (5, 100),
    (15, 80),
    (25, 60),
    (35, 40),
)
PM25_WORST: Final[int] = 20

# (lower bound exclusive, score), descending
DENSITY_STEPS: Final[Sequence[tuple[float, int]]] = (
    (10000, 20),
    (5000, 40),
    (2000, 60),
    (500, 80),
)
POPULATION_STEPS: Final[Sequence[tuple[float, int]]] = (
    (10_000_000, 20),
    (5_000_000, 40),
    (1_000_000, 60),
    (100_000, 80),
)
LEAST_CROWDED: Final[int] = 100

GRADES: Final[Sequence[tuple[int, str]]] = (
    (90, "A+"),
    (80, "A"),
    (70, "B"),
    (60, "C"),
    (50, "D"),
)
FAILING_GRADE: Final[str] = "F"


@dataclass(frozen=True)
class WellbeingScore:
    total: int
    air: int
    temperature: int
    population: int

    @property
    def grade(self) -> str:
        return grade(self.total)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (62.5 -> 63)."""

    return int(math.floor(value + 0.5))


def air_quality_score(pm25: float | None) -> float:
    if pm25 is None:
        return NEUTRAL_SCORE
    for upper, score in PM25_STEPS:
        if pm25 <= upper:
            return score
    return PM25_WORST


def temperature_score(temperature: float | None) -> float:
    if temperature is None:
        return NEUTRAL_SCORE
    deviation = abs(temperature - IDEAL_TEMPERATURE_C)
    return max(0.0, 100 - TEMPERATURE_PENALTY_PER_DEGREE * deviation)


def _crowding_score(
    value: float, steps: Sequence[tuple[float, int]]
) -> float:
    for lower, score in steps:
        if value > lower:
            return score
    return LEAST_CROWDED


def population_score(
    population: float | None, population_density: float | None
) -> float:
    if population_density is not None and population_density > 0:
        return _crowding_score(population_density, DENSITY_STEPS)
    if population is not None and population > 0:
        return _crowding_score(population, POPULATION_STEPS)
    return NEUTRAL_SCORE


def compute_score(
    *,
    pm25: float | None,
    temperature: float | None,
    population: float | None,
    population_density: float | None,
) -> WellbeingScore:
    """Score loose field values; used for both live and persisted data."""

    air = round_half_up(air_quality_score(pm25))
    temp = round_half_up(temperature_score(temperature))
    pop = round_half_up(population_score(population, population_density))
    total = round_half_up(
        air * AIR_WEIGHT + temp * TEMPERATURE_WEIGHT + pop * POPULATION_WEIGHT
    )
    return WellbeingScore(
        total=total, air=air, temperature=temp, population=pop
    )


def score(record: AggregatedCityRecord) -> WellbeingScore:
    """Compute the wellbeing score of an aggregated city record."""

    return compute_score(
        pm25=record.air_quality.pm25,
        temperature=record.weather.temperature,
        population=record.population,
        population_density=record.population_density,
    )


def grade(total: float) -> str:
    """Map a total score to its letter grade."""

    for threshold, letter in GRADES:
        if total >= threshold:
            return letter
    return FAILING_GRADE
