"""HTTP API for the FinLove app."""

from finlove.web.app import create_app

__all__ = ["create_app"]
