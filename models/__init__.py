"""Pydantic models for configuration, tools and conversations."""
