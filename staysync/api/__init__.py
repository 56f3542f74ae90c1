"""
FastAPI application for bookings, unit calendars and the scheduled sweep.
"""
