"""FastAPI application for operating the entity cache."""
