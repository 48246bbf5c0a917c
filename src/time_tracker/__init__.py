"""Time Tracker - project timers with a JSON API and browser-extension endpoints."""

__version__ = "0.1.0"
