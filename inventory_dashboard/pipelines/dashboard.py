import logging
from collections import Counter
from pathlib import Path
from typing import Optional

from inventory_dashboard import insights, parsers, settings
from inventory_dashboard.analytics import Forecaster
from inventory_dashboard.forecast_api import ForecastClient
from inventory_dashboard.pipeline import DataPipeline
from inventory_dashboard.schemas import Observation, ProductAnalytics
from inventory_dashboard.session import DashboardSession

logger = logging.getLogger(__name__)


def default_forecaster(use_remote: bool = None) -> Optional[Forecaster]:
    if use_remote is None:
        use_remote = settings.USE_REMOTE_FORECAST
    return ForecastClient() if use_remote else None


class DashboardPipeline(DataPipeline):
    def __init__(
        self,
        source: Optional[Path] = None,
        csv_text: Optional[str] = None,
        session: Optional[DashboardSession] = None,
        use_remote: bool = None,
        detailed: bool = False,
        search: str = "",
    ):
        super().__init__("inventory dashboard")
        self.source = source
        self.csv_text = csv_text
        self.session = session or DashboardSession(forecaster=default_forecaster(use_remote))
        self.detailed = detailed
        self.search = search

    def extract(self) -> list[Observation] | None:
        if self.csv_text is not None:
            logger.info("--- Reading uploaded CSV text ---")
            return parsers.parse_inventory_text(self.csv_text)

        path = self.source or settings.INPUT_DIR / settings.INPUT_FILENAME
        logger.info(f"--- Reading {path} ---")
        return parsers.parse_inventory_file(path)

    def transform(self, observations: list[Observation]) -> list[ProductAnalytics] | None:
        logger.info("\n--- Computing Product Analytics ---")
        return self.session.upload(observations)

    def load(self, analytics: list[ProductAnalytics]):
        summary = insights.summarize(analytics)
        sources = Counter(product.forecast_source for product in analytics)

        logger.info("\n--- Batch Summary ---")
        logger.info(f"Total products: {summary.total_products}")
        logger.info(f"Low stock: {summary.low_stock_products}")
        logger.info(f"Overstock: {summary.over_stock_products}")
        logger.info(f"Inventory value: ${summary.total_value:,.0f}")
        logger.info(f"Avg turnover: {summary.avg_turnover:.2f}")
        logger.info(
            f"Forecasts: {sources['remote']} remote, {sources['local-fallback']} local fallback"
        )

        shown = insights.filter_products(analytics, self.search)
        if not shown:
            logger.info(f"\nNo products match '{self.search}'.")
        else:
            table = insights.analytics_table(shown, detailed=self.detailed)
            logger.info("\n--- Product Inventory Details ---")
            logger.info(table.to_string(index=False))

        self._log_alerts(analytics)

    def _log_alerts(self, analytics: list[ProductAnalytics]):
        logger.info("\n--- Inventory Alerts ---")
        items = insights.action_items(analytics)
        if not any(product.low_stock_alert or product.over_stock_alert for product in analytics):
            logger.info("✅ All products have healthy stock levels.")

        for product, action in items:
            if product.low_stock_alert:
                logger.warning(
                    f"🔴 {product.product_name}: {product.days_of_stock:.1f} days left. {action}"
                )
            elif product.over_stock_alert:
                logger.warning(
                    f"🟠 {product.product_name}: {product.days_of_stock:.0f} days supply. {action}"
                )
            else:
                logger.info(f"📈 {product.product_name}: {action}")

        if self.detailed:
            up = insights.trending(analytics, "up")
            down = insights.trending(analytics, "down")
            if not up and not down:
                logger.info("No significant trends detected in recent data.")
            for product in up:
                logger.info(f"  ↑ Trending up: {product.product_name}")
            for product in down:
                logger.info(f"  ↓ Trending down: {product.product_name}")
