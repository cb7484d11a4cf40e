"""Catalog adapter abstraction: pluggable product catalog lookup."""

import os

_catalog_instance = None


def get_catalog():
    """Return the configured catalog adapter (singleton).

    Uses FakeCatalog by default. Set CATALOG_ADAPTER=http to read from the
    catalog service at CATALOG_URL.
    """
    global _catalog_instance
    if _catalog_instance is None:
        adapter = os.environ.get("CATALOG_ADAPTER", "fake")
        if adapter == "fake":
            from ordering.catalog.fake_catalog import FakeCatalog

            _catalog_instance = FakeCatalog()
        elif adapter == "http":
            from ordering.catalog.http_catalog import HttpCatalog

            _catalog_instance = HttpCatalog()
        else:
            raise ValueError(f"Unknown catalog adapter: {adapter}")
    return _catalog_instance


def reset_catalog():
    """Reset the catalog singleton (useful for testing)."""
    global _catalog_instance
    _catalog_instance = None
