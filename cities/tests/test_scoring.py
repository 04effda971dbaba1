from __future__ import annotations

# ruff: noqa: S101
import pytest

from cities.engines.types import (
    AggregatedCityRecord,
    AirQualityReading,
    CityLocation,
    WeatherReading,
)
from cities.scoring import (
    WellbeingScore,
    air_quality_score,
    compute_score,
    grade,
    population_score,
    round_half_up,
    score,
    temperature_score,
)


def _record(
    *,
    pm25: float | None = None,
    temperature: float | None = None,
    population: int = 0,
    population_density: float | None = None,
) -> AggregatedCityRecord:
    location = CityLocation(
        id=7,
        name="Testville",
        country="Nowhere",
        latitude=0.0,
        longitude=0.0,
        population=population,
        population_density=population_density,
    )
    return AggregatedCityRecord(
        location=location,
        air_quality=AirQualityReading(pm25=pm25),
        weather=WeatherReading(temperature=temperature),
    )


def test_score_clean_mild_sparse_city_is_perfect() -> None:
    result = score(
        _record(pm25=3, temperature=22.5, population_density=300)
    )

    assert result == WellbeingScore(
        total=100, air=100, temperature=100, population=100
    )
    assert result.grade == "A+"


def test_score_rounds_sub_scores_before_weighting() -> None:
    result = score(
        _record(pm25=40, temperature=35, population=12_000_000)
    )

    assert result.air == 20
    assert result.temperature == 63
    assert result.population == 20
    assert result.total == 33
    assert result.grade == "F"


def test_score_without_any_readings_is_neutral() -> None:
    result = score(_record())

    assert result == WellbeingScore(
        total=50, air=50, temperature=50, population=50
    )
    assert result.grade == "D"


def test_score_with_empty_enrichments_uses_population_rule() -> None:
    record = AggregatedCityRecord(
        location=CityLocation(
            id=1,
            name="Metropolis",
            country="Nowhere",
            latitude=1.0,
            longitude=2.0,
            population=2_000_000,
        ),
    )

    result = score(record)

    assert result.air == 50
    assert result.temperature == 50
    assert result.population == 60
    assert result.total == round_half_up(50 * 0.4 + 50 * 0.3 + 60 * 0.3)


@pytest.mark.parametrize(
    ("pm25", "expected"),
    [
        (0, 100),
        (5, 100),
        (5.01, 80),
        (15, 80),
        (15.5, 60),
        (25, 60),
        (25.1, 40),
        (35, 40),
        (35.01, 20),
        (500, 20),
    ],
)
def test_air_quality_score_boundaries(pm25: float, expected: int) -> None:
    assert air_quality_score(pm25) == expected


def test_air_quality_score_is_non_increasing() -> None:
    values = [air_quality_score(x / 2) for x in range(0, 120)]

    assert set(values) <= {100, 80, 60, 40, 20}
    assert all(a >= b for a, b in zip(values, values[1:], strict=False))


def test_air_quality_score_missing_is_neutral() -> None:
    assert air_quality_score(None) == 50


@pytest.mark.parametrize("delta", [0.0, 0.4, 3.0, 12.5, 33.3, 40.0, 80.0])
def test_temperature_score_is_symmetric(delta: float) -> None:
    above = temperature_score(22.5 + delta)
    below = temperature_score(22.5 - delta)

    assert above == pytest.approx(below)
    assert above == pytest.approx(max(0.0, 100 - 3 * delta))


def test_temperature_score_floors_at_zero() -> None:
    assert temperature_score(-40) == 0
    assert temperature_score(60) == 0
    assert temperature_score(None) == 50


@pytest.mark.parametrize(
    ("density", "expected"),
    [
        (10001, 20),
        (10000, 40),
        (5001, 40),
        (5000, 60),
        (2001, 60),
        (2000, 80),
        (501, 80),
        (500, 100),
        (1, 100),
    ],
)
def test_population_score_density_thresholds(
    density: float, expected: int
) -> None:
    assert population_score(None, density) == expected


@pytest.mark.parametrize(
    ("population", "expected"),
    [
        (12_000_000, 20),
        (6_000_000, 40),
        (1_500_000, 60),
        (150_000, 80),
        (100_000, 100),
        (50, 100),
    ],
)
def test_population_score_falls_back_to_population(
    population: int, expected: int
) -> None:
    assert population_score(population, None) == expected
    assert population_score(population, 0) == expected


def test_population_score_density_takes_precedence() -> None:
    assert population_score(20_000_000, 300) == 100
    assert population_score(1_000, 12_000) == 20


def test_population_score_without_data_is_neutral() -> None:
    assert population_score(None, None) == 50
    assert population_score(0, 0) == 50


def test_score_is_idempotent() -> None:
    record = _record(pm25=12, temperature=18.1, population_density=2500)

    assert score(record) == score(record)


def test_compute_score_outputs_integers_in_range() -> None:
    result = compute_score(
        pm25=9.3,
        temperature=-3.7,
        population=850_000,
        population_density=None,
    )

    for value in (
        result.total,
        result.air,
        result.temperature,
        result.population,
    ):
        assert isinstance(value, int)
        assert 0 <= value <= 100


def test_round_half_up_rounds_halves_up() -> None:
    assert round_half_up(62.5) == 63
    assert round_half_up(-0.5) == 0
    assert round_half_up(32.9) == 33
    assert round_half_up(0.5) == 1
    assert round_half_up(49.49) == 49


@pytest.mark.parametrize(
    ("total", "expected"),
    [
        (100, "A+"),
        (90, "A+"),
        (89, "A"),
        (80, "A"),
        (79, "B"),
        (70, "B"),
        (69, "C"),
        (60, "C"),
        (59, "D"),
        (50, "D"),
        (49, "F"),
        (0, "F"),
    ],
)
def test_grade_thresholds(total: int, expected: str) -> None:
    assert grade(total) == expected
