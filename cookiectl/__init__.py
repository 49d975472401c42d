"""cookiectl: list and whitelist-clean Firefox and Chromium cookie stores."""

from cookiectl.core.constants import APP_VERSION as __version__

__all__ = ["__version__"]
