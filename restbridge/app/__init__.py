"""restbridge FastAPI application."""
