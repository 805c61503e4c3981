"""Shell prompt segments (path, session, OS, weather, media) and Go-style text templates."""

__version__ = "0.1.0"