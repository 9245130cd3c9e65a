__all__ = ["BadResponse", "CryptoPriceClient", "FetchFailed", "NetworkError", "NoApiKey"]

from crypto_panel.api.errors import BadResponse, FetchFailed, NetworkError, NoApiKey
from crypto_panel.api.ninjas import CryptoPriceClient
