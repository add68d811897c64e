"""Availability and booking engine for the service marketplace."""
