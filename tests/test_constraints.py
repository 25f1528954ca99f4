"""Tests for slot window and density threshold validation.

Covers every branch in validate_slot_config() and validate_density_thresholds().
"""

from __future__ import annotations

import pytest

from roombook.domain.constraints import (
    DensityThresholds,
    SlotConfig,
    validate_density_thresholds,
    validate_slot_config,
)
from roombook.domain.slots import SlotModel


def valid_slot_config(**overrides) -> SlotConfig:
    """Return the 07:00-18:00 hourly window, optionally overriding fields."""
    defaults = {"day_start_hour": 7, "day_end_hour": 18, "slot_hours": 1}
    defaults.update(overrides)
    return SlotConfig(**defaults)


def valid_thresholds(**overrides) -> DensityThresholds:
    defaults = {"none_below": 0.01, "light_below": 0.40, "busy_below": 0.70}
    defaults.update(overrides)
    return DensityThresholds(**defaults)


# --- Baseline pass ---

def test_valid_slot_config_passes() -> None:
    validate_slot_config(valid_slot_config())


def test_valid_thresholds_pass() -> None:
    validate_density_thresholds(valid_thresholds())


# --- slot window ---

def test_start_hour_negative_raises() -> None:
    with pytest.raises(ValueError):
        validate_slot_config(valid_slot_config(day_start_hour=-1))


def test_end_hour_not_after_start_raises() -> None:
    with pytest.raises(ValueError):
        validate_slot_config(valid_slot_config(day_start_hour=9, day_end_hour=9))


def test_end_hour_past_midnight_raises() -> None:
    with pytest.raises(ValueError):
        validate_slot_config(valid_slot_config(day_end_hour=25))


def test_slot_hours_zero_raises() -> None:
    with pytest.raises(ValueError):
        validate_slot_config(valid_slot_config(slot_hours=0))


def test_window_not_divisible_by_slot_raises() -> None:
    with pytest.raises(ValueError):
        validate_slot_config(valid_slot_config(slot_hours=2))


def test_slot_model_validates_on_construction() -> None:
    with pytest.raises(ValueError):
        SlotModel(day_start_hour=18, day_end_hour=7)


# --- density thresholds ---

def test_none_bucket_zero_raises() -> None:
    with pytest.raises(ValueError):
        validate_density_thresholds(valid_thresholds(none_below=0.0))


def test_thresholds_out_of_order_raise() -> None:
    with pytest.raises(ValueError):
        validate_density_thresholds(valid_thresholds(light_below=0.80))


def test_busy_threshold_above_one_raises() -> None:
    with pytest.raises(ValueError):
        validate_density_thresholds(valid_thresholds(busy_below=1.5))
