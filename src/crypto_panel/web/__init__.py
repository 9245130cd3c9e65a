__all__ = ["create_app"]

from crypto_panel.web.app import create_app
