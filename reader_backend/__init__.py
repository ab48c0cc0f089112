"""
Feed Reader Backend

A FastAPI backend for a multi-user feed reader.
Provides entry listing, search, read/starred state and unread counts.
"""

__version__ = "2.0.0"
