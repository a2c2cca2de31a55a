"""
Backoffice Test Configuration

Shared fixtures for all tests.
"""
import os
import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from common.models import (
    Booking,
    BookingType,
    Flight,
    PackageStatus,
    Passenger,
    Room,
    TravelPackage,
)
from modules.operations import config as ops_config
from modules.operations.catalog import InMemoryCatalog
from modules.operations.config import OperationsConfig
from modules.operations.service import OperationsService
from modules.operations.storage import InMemoryProjectRepository


# =============================================================================
# FIXTURES: Configuration
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Defaults only: no config/operations.yml, no OPS__ overrides."""
    monkeypatch.setenv("OPS_CONFIG_PATH", str(tmp_path / "missing.yml"))
    for key in list(os.environ):
        if key.startswith("OPS__"):
            monkeypatch.delenv(key)
    ops_config.reload_config()
    yield
    ops_config._config = None


@pytest.fixture
def config() -> OperationsConfig:
    return OperationsConfig()


@pytest.fixture
def reference_date() -> date:
    return date(2026, 3, 1)


# =============================================================================
# FIXTURES: Catalog & Bookings
# =============================================================================

@pytest.fixture
def istanbul() -> TravelPackage:
    """Published package with two departures."""
    return TravelPackage(
        id="pkg-ist",
        product_name="Istanbul Express",
        product_code="IST-26",
        destination="Istanbul",
        status=PackageStatus.PUBLISHED,
        stock=40,
        partner_name="Bosphorus DMC",
        flights=[
            Flight("fl-ist-03", date(2026, 3, 10), date(2026, 3, 17), "Air Algerie"),
            Flight("fl-ist-04", date(2026, 4, 14), date(2026, 4, 21), "Air Algerie"),
        ],
    )


@pytest.fixture
def cairo() -> TravelPackage:
    """Published package departing soon."""
    return TravelPackage(
        id="pkg-cai",
        product_name="Cairo & Luxor",
        status=PackageStatus.PUBLISHED,
        partner_name="Nile Tours",
        flights=[Flight("fl-cai-03", date(2026, 3, 5), date(2026, 3, 12))],
    )


@pytest.fixture
def draft_package() -> TravelPackage:
    return TravelPackage(
        id="pkg-omra",
        product_name="Omra Ramadan",
        status=PackageStatus.DRAFT,
        flights=[Flight("fl-omr-02", date(2026, 3, 2), date(2026, 3, 16))],
    )


@pytest.fixture
def bookings() -> list:
    return [
        Booking(
            id="bk-1",
            package_id="pkg-ist",
            client_name="BENALI KARIM",
            booking_type=BookingType.CONFIRMED,
            number_of_rooms=1,
            rooms=[Room("DOUBLE", [
                Passenger("BENALI KARIM", passport_number="198765432", nationality="DZ"),
                Passenger("BENALI SAMIA", passport_number="198765433", nationality="DZ"),
            ])],
        ),
        Booking(
            id="bk-2",
            package_id="pkg-ist",
            client_name="HADDAD NADIA",
            booking_type=BookingType.CONFIRMED,
            number_of_rooms=2,
            rooms=[Room("SINGLE", [Passenger("HADDAD NADIA")])],
            passengers=[
                Passenger("HADDAD NADIA"),
                Passenger("HADDAD AMINE", pax_type="CHD", passport_number="200011122"),
            ],
        ),
        Booking(
            id="bk-3",
            package_id="pkg-ist",
            client_name="OPTION ONLY",
            booking_type=BookingType.OPTION,
            number_of_rooms=1,
            rooms=[Room("TRIPLE", [Passenger("OPTION ONLY")])],
        ),
        Booking(
            id="bk-4",
            package_id="pkg-cai",
            client_name="OTHER PACKAGE",
            booking_type=BookingType.CONFIRMED,
            number_of_rooms=1,
            rooms=[Room("DOUBLE", [Passenger("OTHER PACKAGE")])],
        ),
    ]


@pytest.fixture
def catalog(istanbul, cairo, draft_package, bookings) -> InMemoryCatalog:
    return InMemoryCatalog([istanbul, cairo, draft_package], bookings)


# =============================================================================
# FIXTURES: Service
# =============================================================================

@pytest.fixture
def repository() -> InMemoryProjectRepository:
    return InMemoryProjectRepository()


@pytest.fixture
def service(repository) -> OperationsService:
    return OperationsService(repository)


@pytest.fixture
def seeded(service, catalog):
    """Service with a project for every catalog package."""
    for package in catalog.list_packages():
        service.create_project(package)
    return service
