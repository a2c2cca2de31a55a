"""Package catalog and booking feed, as seen by operations.

Both are owned by other parts of the backoffice; operations only reads
them. InMemoryCatalog serves both from a YAML export for the CLI, the API
and tests.

YAML layout:
    packages:
      - id: pkg-1
        product_name: Istanbul Express
        status: published
        flights:
          - {id: fl-1, departure_date: 2026-03-10, return_date: 2026-03-17}
    bookings:
      - id: bk-1
        package_id: pkg-1
        client_name: BENALI KARIM
        booking_type: confirmed
        number_of_rooms: 1
        rooms:
          - room_type: DOUBLE
            occupants: [{full_name: BENALI KARIM, passport_number: "123"}]
"""
import logging
from pathlib import Path
from typing import Iterable, Optional, Protocol

import yaml

from common.models import (
    Booking,
    BookingType,
    Flight,
    PackageStatus,
    Passenger,
    Room,
    TravelPackage,
)

from .temporal import as_calendar_date

logger = logging.getLogger(__name__)


class PackageCatalog(Protocol):
    def get_package(self, package_id: str) -> Optional[TravelPackage]:
        ...

    def list_packages(self) -> list[TravelPackage]:
        ...


class BookingFeed(Protocol):
    def bookings_for(self, package_id: str) -> list[Booking]:
        ...


class CatalogSource(PackageCatalog, BookingFeed, Protocol):
    """Packages and their bookings from one source."""


class InMemoryCatalog:
    """Packages and bookings held in memory."""

    def __init__(self, packages: Iterable[TravelPackage] = (), bookings: Iterable[Booking] = ()):
        self._packages = {p.id: p for p in packages}
        self._bookings = list(bookings)

    def get_package(self, package_id: str) -> Optional[TravelPackage]:
        return self._packages.get(package_id)

    def list_packages(self) -> list[TravelPackage]:
        return list(self._packages.values())

    def bookings_for(self, package_id: str) -> list[Booking]:
        return [b for b in self._bookings if b.package_id == package_id]


def _passenger(data: dict) -> Passenger:
    return Passenger(
        full_name=data["full_name"],
        pax_type=data.get("pax_type", "ADL"),
        passport_number=data.get("passport_number"),
        nationality=data.get("nationality"),
    )


def package_from_dict(data: dict) -> TravelPackage:
    flights = [
        Flight(
            id=str(f["id"]),
            departure_date=as_calendar_date(f.get("departure_date")),
            return_date=as_calendar_date(f.get("return_date")),
            airline=f.get("airline", ""),
        )
        for f in data.get("flights", [])
    ]
    return TravelPackage(
        id=str(data["id"]),
        product_name=data.get("product_name", ""),
        product_code=data.get("product_code", ""),
        destination=data.get("destination", ""),
        status=PackageStatus(data.get("status", "draft")),
        stock=data.get("stock"),
        partner_name=data.get("partner_name", ""),
        flights=flights,
    )


def booking_from_dict(data: dict) -> Booking:
    return Booking(
        id=str(data["id"]),
        package_id=str(data["package_id"]),
        client_name=data.get("client_name", ""),
        booking_type=BookingType(data.get("booking_type", "option")),
        agency_name=data.get("agency_name", ""),
        number_of_rooms=int(data.get("number_of_rooms", 0)),
        rooms=[
            Room(room_type=r["room_type"], occupants=[_passenger(o) for o in r.get("occupants", [])])
            for r in data.get("rooms", [])
        ],
        passengers=[_passenger(p) for p in data.get("passengers", [])],
    )


def load_catalog(path: Path) -> InMemoryCatalog:
    """Load packages and bookings from a YAML export."""
    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}
    packages = [package_from_dict(p) for p in data.get("packages", [])]
    bookings = [booking_from_dict(b) for b in data.get("bookings", [])]
    logger.info(f"Loaded catalog {path}: {len(packages)} packages, {len(bookings)} bookings")
    return InMemoryCatalog(packages, bookings)
