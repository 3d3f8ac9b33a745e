"""Persistence, serialization and the time-bounded boundary around them."""
