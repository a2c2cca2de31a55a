"""Base data models shared with the package catalog and booking feed."""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, List
from enum import Enum


class PackageStatus(Enum):
    DRAFT = 'draft'            # In Bearbeitung, nicht sichtbar
    PUBLISHED = 'published'    # Veröffentlicht, operativ


class UserRole(Enum):
    ADMINISTRATOR = 'administrator'
    TRAVEL_DESIGNER = 'travel_designer'
    SALES_AGENT = 'sales_agent'
    VIEWER = 'viewer'


class BookingType(Enum):
    OPTION = 'option'          # En option, reserved until a date
    CONFIRMED = 'confirmed'    # Confirmée


@dataclass(frozen=True)
class Flight:
    """A flight of a package, read from the catalog."""
    id: str
    departure_date: Optional[date] = None
    return_date: Optional[date] = None
    airline: str = ''


@dataclass(frozen=True)
class TravelPackage:
    """Catalog view of a travel package (read-only for operations)."""
    id: str
    product_name: str
    product_code: str = ''
    destination: str = ''
    status: PackageStatus = PackageStatus.DRAFT
    stock: Optional[int] = None
    partner_name: str = ''  # land partner from the itinerary section
    flights: List[Flight] = field(default_factory=list)

    @property
    def is_published(self) -> bool:
        return self.status is PackageStatus.PUBLISHED

    def flight(self, flight_id: str) -> Optional[Flight]:
        return next((f for f in self.flights if f.id == flight_id), None)


@dataclass(frozen=True)
class Passenger:
    """Passenger of a booking. Passport data comes from scans, if any."""
    full_name: str
    pax_type: str = 'ADL'  # ADL / CHD / INF
    passport_number: Optional[str] = None
    nationality: Optional[str] = None


@dataclass(frozen=True)
class Room:
    room_type: str
    occupants: List[Passenger] = field(default_factory=list)


@dataclass(frozen=True)
class Booking:
    """Booking from the sales feed."""
    id: str
    package_id: str
    client_name: str
    booking_type: BookingType = BookingType.OPTION
    agency_name: str = ''
    number_of_rooms: int = 0
    rooms: List[Room] = field(default_factory=list)
    passengers: List[Passenger] = field(default_factory=list)

    @property
    def is_confirmed(self) -> bool:
        return self.booking_type is BookingType.CONFIRMED
