from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from core.bodies import CelestialBody
from core.ganzhi import GanZhi, year_label
from core.jiazi import (
    CYCLE_AFFINITY,
    anchor_year,
    current_cycle,
    cycle_table,
    generate_cycle,
    resolve_body_for_cycle_name,
    resolve_cycle,
)


@pytest.mark.parametrize("reference_year", [-100, 3, 4, 63, 64, 1949, 2024, 2026, 2083])
def test_generate_cycle_anchors(reference_year: int) -> None:
    entries = generate_cycle(reference_year)
    assert len(entries) == 60
    assert len({entry.name for entry in entries}) == 60
    for index, entry in enumerate(entries):
        assert entry.cycle_index == index
        assert entry.label.cycle_index == index
        assert year_label(entry.anchor_year) == entry.label
        assert reference_year - 60 < entry.anchor_year <= reference_year


def test_cycle_starts_with_jiazi() -> None:
    entries = generate_cycle(2026)
    assert entries[0].name == "甲子"
    assert entries[0].anchor_year == 1984
    assert entries[-1].name == "癸亥"
    assert entries[-1].anchor_year == 1983


def test_anchor_year_steps_back_past_reference() -> None:
    bingwu = GanZhi.from_name("丙午")
    assert anchor_year(bingwu, 2026) == 2026
    assert anchor_year(bingwu, 2025) == 1966


def test_cycle_table_is_cached_per_reference_year() -> None:
    assert cycle_table(2026) is cycle_table(2026)
    assert cycle_table(2026) == generate_cycle(2026)


def test_current_cycle_rebases_with_now() -> None:
    early = current_cycle(datetime(2026, 3, 1))
    late = current_cycle(datetime(2090, 3, 1))
    assert early == cycle_table(2026)
    for before, after in zip(early, late):
        assert before.name == after.name
        assert (after.anchor_year - before.anchor_year) % 60 == 0
        assert after.anchor_year >= before.anchor_year


def test_affinity_table_covers_every_cycle_name() -> None:
    names = {entry.name for entry in generate_cycle(2026)}
    assert set(CYCLE_AFFINITY) == names
    assert CelestialBody.earth not in CYCLE_AFFINITY.values()


@pytest.mark.parametrize(
    "name, body",
    [
        ("壬寅", CelestialBody.jupiter),
        ("癸亥", CelestialBody.jupiter),
        ("甲子", CelestialBody.mercury),
        ("癸丑", CelestialBody.mercury),
        ("甲辰", CelestialBody.mercury),
        ("丙午", CelestialBody.mars),
        ("戊戌", CelestialBody.saturn),
        ("庚申", CelestialBody.venus),
    ],
)
def test_resolve_body_for_cycle_name(name: str, body: CelestialBody) -> None:
    assert resolve_body_for_cycle_name(name) is body


def test_unmapped_names_fall_back_to_earth(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="core.jiazi"):
        assert resolve_body_for_cycle_name("甲丑") is CelestialBody.earth
        assert resolve_body_for_cycle_name("default") is CelestialBody.earth
    assert "cycle_affinity_fallback" in caplog.text


def test_resolve_cycle() -> None:
    assert resolve_cycle("壬寅", 2026) == (2022, CelestialBody.jupiter)
    assert resolve_cycle("甲辰", 2026) == (2024, CelestialBody.mercury)
    assert resolve_cycle("丙午", 2025) == (1966, CelestialBody.mars)


def test_resolve_cycle_rejects_non_cycle_names() -> None:
    with pytest.raises(ValueError):
        resolve_cycle("甲丑", 2026)
    with pytest.raises(ValueError):
        resolve_cycle("nope", 2026)
