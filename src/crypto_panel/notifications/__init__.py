__all__ = ["ToastNotifier"]

from crypto_panel.notifications.toast import ToastNotifier
