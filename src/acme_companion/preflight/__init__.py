"""Startup checks run before the companion service starts."""
