# backend/timegrid/services/slots/resources.py
"""
Resource capacity filtering.

A resource with quantity N can serve N overlapping bookings. A slot is kept
when at least one resource of the service's type still has a free unit.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from .types import AvailableResource, CandidateSlot, ResourceBookingInfo, ResourceInfo


def resources_for_type(
    resources: Iterable[ResourceInfo],
    resource_type_id: str | None,
) -> list[ResourceInfo]:
    if resource_type_id is None:
        return []
    return [r for r in resources if r.resource_type_id == str(resource_type_id)]


def _index_bookings(
    bookings: Iterable[ResourceBookingInfo],
) -> dict[tuple[str, date], list[ResourceBookingInfo]]:
    index: dict[tuple[str, date], list[ResourceBookingInfo]] = defaultdict(list)
    for booking in bookings:
        index[(booking.resource_id, booking.date)].append(booking)
    return index


def filter_by_resources(
    slots: list[CandidateSlot],
    pool: list[ResourceInfo],
    bookings: Iterable[ResourceBookingInfo] | None,
) -> list[CandidateSlot]:
    """
    Keep slots with at least one free resource unit and attach resource data.

    Args:
        slots: Grouped candidate slots
        pool: Resources of the service's resource type
        bookings: Existing resource bookings over the searched dates,
                  or None when booking data is not available

    Returns:
        Surviving slots with requires_resource / available_resources set.
        An empty pool returns the slots untouched. bookings=None treats
        every resource as fully available.
    """
    if not pool:
        return slots

    index = _index_bookings(bookings) if bookings is not None else {}

    result: list[CandidateSlot] = []
    for slot in slots:
        window = slot.time_range
        available: list[AvailableResource] = []

        for resource in pool:
            overlapping = sum(
                1
                for booking in index.get((resource.id, slot.date), ())
                if booking.time_range.overlaps(window)
            )
            if overlapping < resource.quantity:
                available.append(AvailableResource(
                    id=resource.id,
                    name=resource.name,
                    quantity=resource.quantity,
                    available=resource.quantity - overlapping,
                ))

        if available:
            slot.requires_resource = True
            slot.available_resources = available
            result.append(slot)

    return result
