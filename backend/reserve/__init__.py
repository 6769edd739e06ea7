"""Happiness Reserve backend package."""
