"""Shared helpers: dates, errors, logging and storage error translation."""
