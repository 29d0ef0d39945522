"""
File Catalog Connector

Loads the admin catalog from a directory of exported tables, one
``<table>.json`` or ``<table>.csv`` file per table.
"""

import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from risk_scoring.catalog import CATALOG_TABLES, CatalogSnapshot

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def records_from_frame(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Convert a table to row dictionaries, leaving out blank cells"""
    records = df.to_dict(orient="records")
    return [
        {column: value for column, value in record.items() if not _is_blank(value)}
        for record in records
    ]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


class FileCatalogConnector:
    """Connector for catalog tables exported to disk"""

    def __init__(self, catalog_path: Union[str, Path]):
        self.catalog_path = Path(catalog_path)

    def fetch_table(self, table: str) -> Optional[List[Dict[str, Any]]]:
        """
        Read one catalog table

        Args:
            table: Table name, e.g. "hazards"

        Returns:
            List of row dictionaries, or None if the table is missing or unreadable
        """
        json_path = self.catalog_path / f"{table}.json"
        csv_path = self.catalog_path / f"{table}.csv"

        try:
            if json_path.exists():
                df = pd.read_json(json_path, orient="records", dtype=False, convert_dates=False)
            elif csv_path.exists():
                # Keep cells as text; the catalog models do the typing
                df = pd.read_csv(csv_path, dtype=str)
            else:
                logger.warning(f"Catalog table {table!r} not found in {self.catalog_path}")
                return None
        except (OSError, ValueError) as e:
            logger.error(f"Error reading catalog table {table!r}: {e}")
            return None

        rows = records_from_frame(df)
        logger.info(f"Loaded {len(rows)} row(s) from {table!r}")
        return rows

    def load_snapshot(self) -> CatalogSnapshot:
        """
        Read every catalog table and build a snapshot

        Raises:
            CatalogUnavailableError: if a required table is missing or invalid
        """
        tables = {table: self.fetch_table(table) for table in CATALOG_TABLES}
        return CatalogSnapshot.from_tables(tables)
