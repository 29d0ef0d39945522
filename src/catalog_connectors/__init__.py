"""
Catalog Connectors for the Risk Engine

This package contains connectors for the admin catalog:
- File: tables exported as JSON/CSV files
- HTTP: tables served by the admin REST service
"""

from .file_catalog_connector import FileCatalogConnector
from .http_catalog_connector import HTTPCatalogConnector


def connector_from_settings(settings):
    """HTTP connector when a catalog URL is configured, otherwise the file connector"""
    if settings.catalog_url:
        return HTTPCatalogConnector(settings.catalog_url, timeout=settings.request_timeout)
    return FileCatalogConnector(settings.catalog_path)


__all__ = [
    "FileCatalogConnector",
    "HTTPCatalogConnector",
    "connector_from_settings",
]
