"""Mock REST API backed by a flat JSON file."""
from mockapi.app import create_app

__all__ = ["create_app"]

__version__ = "0.3.0"
