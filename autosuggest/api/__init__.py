"""API package — FastAPI HTTP glue around the suggestion engine."""

from autosuggest.api.app import create_app

__all__ = ["create_app"]
