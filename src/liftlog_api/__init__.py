"""LiftLog API: workout progression and split parsing service."""

__version__ = "0.1.0"
