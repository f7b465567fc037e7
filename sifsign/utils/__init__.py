"""Shared helpers for SifSign."""
