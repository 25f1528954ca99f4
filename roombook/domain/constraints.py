"""Domain-level validation rules for the slot window and density buckets."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SlotConfig:
    day_start_hour: int
    day_end_hour: int
    slot_hours: int


@dataclass(frozen=True)
class DensityThresholds:
    none_below: float
    light_below: float
    busy_below: float


def validate_slot_config(config: SlotConfig) -> None:
    if not 0 <= config.day_start_hour < 24:
        raise ValueError("day_start_hour must be between 0 and 23")
    if not config.day_start_hour < config.day_end_hour <= 24:
        raise ValueError("day_end_hour must be after day_start_hour and <= 24")
    if config.slot_hours <= 0:
        raise ValueError("slot_hours must be > 0")
    if (config.day_end_hour - config.day_start_hour) % config.slot_hours != 0:
        raise ValueError("bookable window must divide evenly into slots")


def validate_density_thresholds(thresholds: DensityThresholds) -> None:
    if not 0.0 < thresholds.none_below < thresholds.light_below:
        raise ValueError("none_below must be > 0 and below light_below")
    if not thresholds.light_below < thresholds.busy_below <= 1.0:
        raise ValueError("busy_below must be above light_below and <= 1")
