"""Tests for the YAML catalog export."""
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from common.models import BookingType, PackageStatus
from modules.operations.catalog import load_catalog

CATALOG_YAML = """
packages:
  - id: pkg-1
    product_name: Istanbul Express
    status: published
    partner_name: Bosphorus DMC
    flights:
      - {id: fl-1, departure_date: 2026-03-10, return_date: 2026-03-17}
      - {id: fl-2, departure_date: "2026-04-14"}
  - id: pkg-2
    product_name: Omra
bookings:
  - id: bk-1
    package_id: pkg-1
    client_name: BENALI KARIM
    booking_type: confirmed
    number_of_rooms: 1
    rooms:
      - room_type: DOUBLE
        occupants:
          - {full_name: BENALI KARIM, passport_number: "123"}
  - id: bk-2
    package_id: pkg-2
    client_name: X
"""


def test_load_catalog(tmp_path):
    path = tmp_path / "catalog.yml"
    path.write_text(CATALOG_YAML)
    catalog = load_catalog(path)

    pkg = catalog.get_package("pkg-1")
    assert pkg.status is PackageStatus.PUBLISHED
    assert pkg.flights[0].departure_date == date(2026, 3, 10)
    assert pkg.flights[1].departure_date == date(2026, 4, 14)
    assert pkg.flights[1].return_date is None
    assert catalog.get_package("pkg-2").status is PackageStatus.DRAFT
    assert catalog.get_package("pkg-3") is None
    assert len(catalog.list_packages()) == 2

    bookings = catalog.bookings_for("pkg-1")
    assert [b.id for b in bookings] == ["bk-1"]
    assert bookings[0].booking_type is BookingType.CONFIRMED
    assert bookings[0].rooms[0].occupants[0].passport_number == "123"
    assert catalog.bookings_for("pkg-2")[0].booking_type is BookingType.OPTION


def test_example_catalog_loads():
    path = Path(__file__).resolve().parent.parent.parent / "config" / "catalog.example.yml"
    catalog = load_catalog(path)
    assert catalog.get_package("pkg-ist-2026").is_published
