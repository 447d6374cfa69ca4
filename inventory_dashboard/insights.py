import math
from typing import Iterable, Sequence

import pandas as pd

from . import settings
from .analytics import sort_series
from .schemas import DashboardSummary, Observation, ProductAnalytics, Trend


def stock_status(product: ProductAnalytics) -> str:
    if product.low_stock_alert:
        return "Low Stock"
    if product.over_stock_alert:
        return "Overstock"
    return "Good"


def recommendation(product: ProductAnalytics) -> str:
    """Suggested action for a product, checked in alert priority order."""
    if product.low_stock_alert:
        days = settings.REORDER_DAYS_LOW_STOCK
        units = math.ceil(product.avg_daily_sales * days)
        return f"Order {units} units ({days} days supply)"
    if product.over_stock_alert:
        return "Consider promotion or discount to move inventory"
    if product.trend == "up":
        units = math.ceil(product.avg_daily_sales * settings.REORDER_DAYS_TRENDING_UP)
        return f"Consider ordering {units} extra units due to upward trend"
    return "No action needed"


def summarize(analytics: Sequence[ProductAnalytics]) -> DashboardSummary:
    """
    Headline numbers for the batch.
    Turnover is the mean of 1 / days of stock, with 0 days counted as 1.
    """
    total = len(analytics)
    avg_turnover = (
        sum(1 / (product.days_of_stock or 1) for product in analytics) / total
        if total
        else 0.0
    )
    return DashboardSummary(
        total_products=total,
        low_stock_products=sum(1 for product in analytics if product.low_stock_alert),
        over_stock_products=sum(1 for product in analytics if product.over_stock_alert),
        total_value=sum(product.current_inventory * settings.UNIT_VALUE for product in analytics),
        avg_turnover=avg_turnover,
    )


def trending(
    analytics: Iterable[ProductAnalytics], direction: Trend, limit: int = 3
) -> list[ProductAnalytics]:
    return [product for product in analytics if product.trend == direction][:limit]


def action_items(analytics: Sequence[ProductAnalytics]) -> list[tuple[ProductAnalytics, str]]:
    """Low stock first, then overstock, then the top two products trending up."""
    low = [product for product in analytics if product.low_stock_alert]
    over = [product for product in analytics if product.over_stock_alert]
    rising = trending(analytics, "up")[:2]
    return [(product, recommendation(product)) for product in low + over + rising]


def filter_products(
    analytics: Iterable[ProductAnalytics], search: str = ""
) -> list[ProductAnalytics]:
    needle = (search or "").lower()
    return [product for product in analytics if needle in product.product_name.lower()]


def product_history(observations: Iterable[Observation], product_name: str) -> list[Observation]:
    """Date-sorted raw observations for one product, used for the history chart."""
    return sort_series(obs for obs in observations if obs.product_name == product_name)


def analytics_table(analytics: Sequence[ProductAnalytics], detailed: bool = False) -> pd.DataFrame:
    """Tabular view of a batch. The `detailed` flag only adds columns."""
    rows = []
    for product in analytics:
        row = {
            "Product": product.product_name,
            "Current Stock": product.current_inventory,
            "Avg Daily Sales": round(product.avg_daily_sales, 1),
            "Days of Stock": round(product.days_of_stock, 1),
            "Trend": product.trend,
            "Status": stock_status(product),
        }
        if detailed:
            row["Total Sold"] = product.total_sold
            row["Forecast"] = ", ".join(str(value) for value in product.forecast)
            row["Forecast Source"] = product.forecast_source
        rows.append(row)

    columns = ["Product", "Current Stock", "Avg Daily Sales", "Days of Stock", "Trend", "Status"]
    if detailed:
        columns += ["Total Sold", "Forecast", "Forecast Source"]
    return pd.DataFrame(rows, columns=columns)
