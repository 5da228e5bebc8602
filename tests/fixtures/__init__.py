"""Shared test entities."""
