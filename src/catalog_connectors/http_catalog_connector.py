"""
HTTP Catalog Connector

Fetches the admin catalog tables from the admin REST service.
Each table is served as a JSON list at ``<base_url>/<table>``.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from risk_scoring.catalog import CATALOG_TABLES, CatalogSnapshot

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class HTTPCatalogConnector:
    """Connector for the admin catalog REST service"""

    def __init__(self, base_url: str, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def fetch_table(self, table: str) -> Optional[List[Dict[str, Any]]]:
        """
        Fetch one catalog table

        Args:
            table: Table name, e.g. "multiplier_rules"

        Returns:
            List of row dictionaries, or None if the request failed
        """
        url = f"{self.base_url}/{table}"

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching catalog table {table!r}: {e}")
            return None
        except ValueError as e:
            logger.error(f"Catalog table {table!r} is not valid JSON: {e}")
            return None

        # The admin service wraps lists as {"data": [...]}
        if isinstance(data, dict):
            data = data.get("data")
        if not isinstance(data, list):
            logger.error(f"Catalog table {table!r} did not return a list")
            return None

        logger.info(f"Fetched {len(data)} row(s) from {table!r}")
        return data

    def load_snapshot(self) -> CatalogSnapshot:
        """
        Fetch every catalog table and build a snapshot

        Raises:
            CatalogUnavailableError: if a required table could not be fetched or is invalid
        """
        tables = {table: self.fetch_table(table) for table in CATALOG_TABLES}
        return CatalogSnapshot.from_tables(tables)
