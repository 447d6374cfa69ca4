import logging
from pathlib import Path
import pandas as pd

logger = logging.getLogger(__name__)


def find_column(columns: list[str], keyword: str) -> str | None:
    """Returns the first column whose lowercased name contains `keyword`."""
    for column in columns:
        if keyword in str(column).strip().lower():
            return column
    return None


def load_csv(file_path: Path) -> pd.DataFrame | None:
    """
    CSV loader with an encoding fallback.
    It will attempt to read a file in the following order:
    1. UTF-8 with BOM support ('utf-8-sig').
    2. Latin-1, which can decode any byte sequence.
    Returns None when the file is missing or cannot be parsed.
    """
    try:
        return pd.read_csv(file_path, encoding="utf-8-sig", dtype=str)

    except UnicodeDecodeError:
        logger.info(f"UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'.")
        try:
            return pd.read_csv(file_path, encoding="latin-1", dtype=str)
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e_latin1:
            logger.error(f"Could not read {file_path.name} even with latin-1. Reason: {e_latin1}")
            return None

    except FileNotFoundError:
        logger.warning(f"Report not found at {file_path}, skipping.")
        return None

    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e_general:
        logger.error(f"Could not parse {file_path.name}. Reason: {e_general}")
        return None
