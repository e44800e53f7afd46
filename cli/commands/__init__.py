"""Hazard Map CLI commands."""
