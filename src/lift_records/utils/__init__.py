"""Utility functions for lift-records."""
