from .directory_api import app

__all__ = ["app"]
