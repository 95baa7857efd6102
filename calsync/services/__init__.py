"""Calendar sync jobs

Module layout:
- google_calendar/: Google Calendar API client
- live.py: shows API -> Live calendar
- management.py: mgm_events -> Management calendar
- booking.py: booking_events -> Booking calendar
- releases.py: releases API -> Records calendar
- orchestrator.py: runs every job in sequence
"""
