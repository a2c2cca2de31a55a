"""Shared data models across modules."""

from .base import (
    Booking,
    BookingType,
    Flight,
    PackageStatus,
    Passenger,
    Room,
    TravelPackage,
    UserRole,
)

__all__ = [
    'Booking',
    'BookingType',
    'Flight',
    'PackageStatus',
    'Passenger',
    'Room',
    'TravelPackage',
    'UserRole',
]
