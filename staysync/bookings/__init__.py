"""
Booking rules shared by the API and the sync engine.
"""

from .conflicts import intervals_overlap, find_conflict

__all__ = ['intervals_overlap', 'find_conflict']
