"""Settings and pydantic models shared across the engine."""
