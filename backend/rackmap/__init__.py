"""Rack occupancy and slot-placement service."""
