__all__ = ["PriceFetcher", "RefreshScheduler", "SettingsScreen"]

from crypto_panel.engine.fetcher import PriceFetcher
from crypto_panel.engine.scheduler import RefreshScheduler
from crypto_panel.engine.settings_screen import SettingsScreen
