import io
import logging
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from .exceptions import IngestionError
from .schemas import Observation
from .utils import find_column, load_csv

logger = logging.getLogger(__name__)

# Internal field -> keyword its header must contain (case-insensitive).
COLUMN_KEYWORDS = {
    "date": "date",
    "product_name": "product",
    "inventory": "inventory",
    "sold": "sold",
}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Maps the uploaded headers onto the internal schema.
    Headers only need to contain the keyword, so 'Product Name' and 'product' both match.
    """
    columns = list(df.columns)
    mapping = {field: find_column(columns, keyword) for field, keyword in COLUMN_KEYWORDS.items()}

    missing = [COLUMN_KEYWORDS[field] for field, column in mapping.items() if column is None]
    if missing:
        raise IngestionError(f"Missing required columns: {', '.join(missing)}")

    normalized = pd.DataFrame({field: df[column] for field, column in mapping.items()})
    for field in ("date", "product_name"):
        normalized[field] = normalized[field].astype("string").str.strip()
        normalized[field] = normalized[field].replace("", pd.NA)
    for field in ("inventory", "sold"):
        normalized[field] = pd.to_numeric(normalized[field], errors="coerce")
    return normalized


def parse_inventory_report(df: pd.DataFrame) -> list[Observation]:
    """
    Turns an uploaded inventory/sales table into validated observations.
    Rows missing a required value, carrying non-integer counts, or failing
    validation are dropped; the batch only fails when nothing usable is left.
    """
    normalized = _normalize_columns(df)

    # 1. Drop rows with a missing or non-numeric required field
    usable = normalized.dropna()

    # 2. Counts must be whole numbers
    whole_numbers = (usable["inventory"] % 1 == 0) & (usable["sold"] % 1 == 0)
    usable = usable[whole_numbers]

    # 3. Validate against the schema row by row
    observations = []
    rejected = 0
    for row in usable.itertuples(index=False):
        try:
            observations.append(
                Observation(
                    date=row.date,
                    product_name=row.product_name,
                    inventory=int(row.inventory),
                    sold=int(row.sold),
                )
            )
        except ValidationError as e:
            rejected += 1
            logger.debug(f"Rejected row {row}: {e}")

    skipped = len(df) - len(observations)
    if skipped:
        logger.warning(f"⚠️ Skipped {skipped} malformed row(s) ({rejected} failed validation).")

    if not observations:
        raise IngestionError("No valid data found in file")

    logger.info(f"✅ Parsed {len(observations)} observation(s).")
    return observations


def parse_inventory_file(file_path: Path) -> list[Observation]:
    """Loads a CSV upload from disk and parses it."""
    df = load_csv(file_path)
    if df is None:
        raise IngestionError(f"Could not read {file_path}")
    logger.info(f"Loaded {file_path.name} ({len(df)} rows).")
    return parse_inventory_report(df)


def parse_inventory_text(csv_text: str) -> list[Observation]:
    """Parses CSV text received directly from an upload."""
    try:
        df = pd.read_csv(io.StringIO(csv_text), dtype=str, skipinitialspace=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise IngestionError(f"Failed to parse file: {e}") from e
    return parse_inventory_report(df)
