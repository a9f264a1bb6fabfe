"""Authorization helpers."""
