"""Shared models used across the migration pipeline."""
