import logging
import threading
from typing import Iterable, Optional

from .analytics import Forecaster, analyze_batch
from .schemas import Observation, ProductAnalytics

logger = logging.getLogger(__name__)


class DashboardSession:
    """
    Holds the currently displayed batch.

    Every upload gets a new batch id. A batch that finishes after a newer upload
    (or a reset) has started is dropped, so stale remote forecasts never replace
    fresher state.
    """

    def __init__(self, forecaster: Optional[Forecaster] = None, max_workers: int = None):
        self.forecaster = forecaster
        self.max_workers = max_workers
        self._lock = threading.Lock()
        self._batch_id = 0
        self.observations: list[Observation] = []
        self.analytics: list[ProductAnalytics] = []

    @property
    def batch_id(self) -> int:
        return self._batch_id

    def _start_batch(self) -> int:
        with self._lock:
            self._batch_id += 1
            return self._batch_id

    def upload(self, observations: Iterable[Observation]) -> list[ProductAnalytics] | None:
        """
        Computes analytics for a new batch and publishes them.
        Returns None when the batch was superseded before it completed.
        """
        observations = list(observations)
        batch_id = self._start_batch()

        results = analyze_batch(observations, self.forecaster, self.max_workers)

        with self._lock:
            if batch_id != self._batch_id:
                logger.info(f"Discarding results of superseded batch #{batch_id}.")
                return None
            self.observations = observations
            self.analytics = results
        return results

    def reset(self):
        """Clears the dashboard and invalidates any batch still in flight."""
        self._start_batch()
        with self._lock:
            self.observations = []
            self.analytics = []
