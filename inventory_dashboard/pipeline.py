import logging
from abc import ABC, abstractmethod
from typing import Any

from .exceptions import IngestionError

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for batch pipelines.
    Follows an Extract -> Transform -> Load (ETL) pattern.
    """

    def __init__(self, report_type: str):
        self.report_type = report_type

    def run(self) -> Any:
        """
        Orchestrates the pipeline execution.
        Returns the transformed batch, or None when there was nothing to show.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        try:
            raw_data = self.extract()
        except IngestionError as e:
            logger.error(f"❌ {e}. No data to display.")
            return None
        if not raw_data:
            logger.warning(f"⚠️ No data extracted for {self.report_type}.")
            return None

        # --- 2. TRANSFORM ---
        results = self.transform(raw_data)
        if results is None:
            logger.warning(f"⚠️ {self.report_type.capitalize()} batch was superseded; nothing loaded.")
            return None

        # --- 3. LOAD ---
        self.load(results)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return results

    @abstractmethod
    def extract(self) -> list[Any] | None:
        """
        Responsible for reading the upload and returning validated records.
        Raises IngestionError when the upload is unusable as a whole.
        """
        pass

    @abstractmethod
    def transform(self, records: list[Any]) -> list[Any] | None:
        """
        Responsible for turning records into analytics.
        Returns None when the batch should not be loaded.
        """
        pass

    @abstractmethod
    def load(self, results: list[Any]):
        """Hands the finished batch to the presentation side."""
        pass
