"""Read-only manifest and rooming summaries from the booking feed.

Only confirmed bookings count; options are ignored. Bookings are never
modified here.
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional

from common.models import Booking


@dataclass(frozen=True)
class ManifestEntry:
    full_name: str
    booking_id: str
    pax_type: str = "ADL"
    passport_number: Optional[str] = None
    nationality: Optional[str] = None


@dataclass(frozen=True)
class Manifest:
    entries: list[ManifestEntry] = field(default_factory=list)
    total_rooms: int = 0
    rooms_by_type: dict[str, int] = field(default_factory=dict)
    booking_count: int = 0

    @property
    def passenger_count(self) -> int:
        return len(self.entries)

    @property
    def missing_passports(self) -> list[ManifestEntry]:
        return [e for e in self.entries if not e.passport_number]


def _passengers(booking: Booking):
    # Passengers listed on the booking win over room occupants
    if booking.passengers:
        return booking.passengers
    return [p for room in booking.rooms for p in room.occupants]


def build_manifest(bookings: Iterable[Booking], package_id: Optional[str] = None) -> Manifest:
    """Passenger list and rooming counts of the confirmed bookings.

    Args:
        bookings: booking feed (any package unless ``package_id`` is given)
        package_id: restrict to one package
    """
    confirmed = [
        b for b in bookings
        if b.is_confirmed and (package_id is None or b.package_id == package_id)
    ]

    entries = []
    rooms_by_type: Counter = Counter()
    total_rooms = 0
    for booking in confirmed:
        for pax in _passengers(booking):
            entries.append(ManifestEntry(
                full_name=pax.full_name,
                booking_id=booking.id,
                pax_type=pax.pax_type,
                passport_number=pax.passport_number,
                nationality=pax.nationality,
            ))
        for room in booking.rooms:
            rooms_by_type[room.room_type] += 1
        # Legacy bookings carry only a room count
        total_rooms += booking.number_of_rooms or len(booking.rooms)

    return Manifest(
        entries=entries,
        total_rooms=total_rooms,
        rooms_by_type=dict(rooms_by_type),
        booking_count=len(confirmed),
    )
