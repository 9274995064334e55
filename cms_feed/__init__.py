"""
cms-feed

Serves the items of one headless-CMS model as a filtered, uniform JSON API.
Item fields are enriched with schema display names and asset URLs, optionally
projected to an allow-list and filtered by row conditions.

Usage:
    from cms_feed import Settings, items_router

    app.include_router(items_router(get_settings=Settings.from_env))

or run the bundled app:

    cms-feed serve --port 8080
"""

__version__ = "1.0.0"

from .config import Settings  # noqa: E402
from .router import items_router  # noqa: E402

__all__ = ["Settings", "items_router", "__version__"]
