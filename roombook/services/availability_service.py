"""Slot occupancy, density classification, and calendar projection."""

from __future__ import annotations

import calendar
from datetime import date as date_type
from typing import Optional

from roombook.domain.constraints import DensityThresholds, validate_density_thresholds
from roombook.domain.models import (
    BookingRequest,
    CalendarDay,
    Density,
    ResourceCatalog,
    TimeInterval,
)
from roombook.domain.slots import SlotModel, overlaps
from roombook.repository.ledger_store import RequestLedger
from roombook.utils.config import Settings, get_settings


def thresholds_from_settings(settings: Settings) -> DensityThresholds:
    return DensityThresholds(
        none_below=settings.density_none_below,
        light_below=settings.density_light_below,
        busy_below=settings.density_busy_below,
    )


def slot_model_from_settings(settings: Settings) -> SlotModel:
    return SlotModel(
        day_start_hour=settings.day_start_hour,
        day_end_hour=settings.day_end_hour,
        slot_hours=settings.slot_hours,
    )


def classify_density(fraction: float, thresholds: DensityThresholds) -> Density:
    if fraction < thresholds.none_below:
        return Density.NONE
    if fraction < thresholds.light_below:
        return Density.LIGHT
    if fraction < thresholds.busy_below:
        return Density.BUSY
    return Density.FULL


class AvailabilityProjector:
    """Derives occupancy from approved requests only.

    Nothing is cached: every call reads the current ledger, so a refresh or a
    local write is reflected immediately on the next query.
    """

    def __init__(
        self,
        store: RequestLedger,
        catalog: ResourceCatalog,
        slot_model: Optional[SlotModel] = None,
        thresholds: Optional[DensityThresholds] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._store = store
        self._catalog = catalog
        self._slot_model = slot_model or slot_model_from_settings(self._settings)
        self._thresholds = thresholds or thresholds_from_settings(self._settings)
        validate_density_thresholds(self._thresholds)

    @property
    def slot_model(self) -> SlotModel:
        return self._slot_model

    def is_closed(self, resource_id: str, date: str) -> bool:
        resource = self._catalog.get(resource_id)
        if resource is None:
            return False
        return resource.is_closed_on(date_type.fromisoformat(date).weekday())

    def get_bookings_for_date(self, resource_id: str, date: str) -> list[BookingRequest]:
        return sorted(
            self._store.approved_for(resource_id, date),
            key=lambda booking: booking.start_time,
        )

    def get_occupied_slots(self, resource_id: str, date: str) -> frozenset[TimeInterval]:
        slots = self._slot_model.slots_for_day()
        if self.is_closed(resource_id, date):
            return frozenset(slots)
        bookings = self._store.approved_for(resource_id, date)
        return frozenset(
            slot
            for slot in slots
            if any(overlaps(slot, booking.interval) for booking in bookings)
        )

    def get_free_slots(self, resource_id: str, date: str) -> frozenset[TimeInterval]:
        occupied = self.get_occupied_slots(resource_id, date)
        return frozenset(slot for slot in self._slot_model.slots_for_day() if slot not in occupied)

    def get_booked_fraction(self, resource_id: str, date: str) -> float:
        booked_hours = sum(
            self._slot_model.clipped_hours(booking.interval)
            for booking in self._store.approved_for(resource_id, date)
        )
        return min(booked_hours / self._slot_model.day_hours, 1.0)

    def get_density(self, resource_id: str, date: str) -> Density:
        return classify_density(
            self.get_booked_fraction(resource_id, date),
            self._thresholds,
        )

    def calendar_month(
        self,
        resource_id: str,
        year: int,
        month: int,
        today: date_type,
    ) -> list[CalendarDay]:
        days_in_month = calendar.monthrange(year, month)[1]
        cells: list[CalendarDay] = []
        for day in range(1, days_in_month + 1):
            current = date_type(year, month, day)
            iso = current.isoformat()
            cells.append(
                CalendarDay(
                    date=iso,
                    density=self.get_density(resource_id, iso),
                    closed=self.is_closed(resource_id, iso),
                    past=current < today,
                )
            )
        return cells
