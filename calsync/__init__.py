"""Sync shows, management events, bookings and releases into Google Calendars"""

__version__ = "0.1.0"
