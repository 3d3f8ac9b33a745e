"""Core planning engine: taxonomy, volume analytics, reducer, projection."""
