import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, Optional, Sequence

from . import settings
from .exceptions import RemoteForecastError
from .schemas import Observation, ProductAnalytics, Trend

logger = logging.getLogger(__name__)

# A forecaster takes (product_name, sorted series) and returns one value per future day.
# It signals failure by raising RemoteForecastError.
Forecaster = Callable[[str, list[Observation]], list[int]]


def round_half_up(value: float) -> int:
    """Rounds to the nearest integer, with .5 always going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def group_by_product(items: Iterable[Any]) -> dict[str, list[Any]]:
    """
    Partitions items by their `product_name`, keeping every item and the input
    order inside each group. Works for raw observations and for analytics records.
    """
    grouped: dict[str, list[Any]] = {}
    for item in items:
        grouped.setdefault(item.product_name, []).append(item)
    return grouped


def sort_series(series: Iterable[Observation]) -> list[Observation]:
    # sorted() is stable, so duplicate dates keep their upload order.
    return sorted(series, key=lambda obs: obs.date)


def _window_mean(values: Sequence[int], start: int, stop: Optional[int], size: int) -> float:
    """Mean over values[start:stop] with a fixed divisor; missing positions count as 0."""
    return sum(values[start:stop]) / size


def classify_trend(series: Sequence[Observation]) -> Trend:
    """
    Compares the mean of the last window of sales against the window before it.
    Anything inside the up/down band is reported as stable.
    """
    window = settings.TREND_WINDOW
    if len(series) < window * 2:
        return "stable"

    sold = [obs.sold for obs in series]
    recent = _window_mean(sold, -window, None, window)
    older = _window_mean(sold, -2 * window, -window, window)

    if recent > older * settings.TREND_UP_FACTOR:
        return "up"
    if recent < older * settings.TREND_DOWN_FACTOR:
        return "down"
    return "stable"


def local_forecast(series: Sequence[Observation], days: int = None) -> list[int]:
    """
    Moving average of the last two windows plus a linearly damped trend term.
    Day 0 gets no trend adjustment. Short histories forecast zeros.
    """
    if days is None:
        days = settings.FORECAST_HORIZON_DAYS
    if len(series) < settings.MIN_FORECAST_HISTORY:
        return [0] * days

    window = settings.TREND_WINDOW
    sold = [obs.sold for obs in series]
    recent_sales = sold[-2 * window:]
    avg_sales = sum(recent_sales) / len(recent_sales)

    # Python slicing clamps like the range rule: [-14:-7] of a 10-item list is items 0..2.
    trend_delta = _window_mean(sold, -window, None, window) - _window_mean(
        sold, -2 * window, -window, window
    )

    damping = settings.FORECAST_TREND_DAMPING
    return [
        max(0, round_half_up(avg_sales + trend_delta * damping * index))
        for index in range(days)
    ]


def compute_product_analytics(
    product_name: str,
    series: Iterable[Observation],
    forecaster: Optional[Forecaster] = None,
) -> ProductAnalytics:
    """
    Builds the full analytics record for one product.

    When a forecaster is given it is tried first; any RemoteForecastError it raises
    is logged and replaced by the local forecast.
    """
    ordered = sort_series(series)
    count = len(ordered)

    total_sold = sum(obs.sold for obs in ordered)
    avg_daily_sales = total_sold / count if count else 0.0
    current_inventory = ordered[-1].inventory if ordered else 0
    days_of_stock = current_inventory / max(avg_daily_sales, 1)

    forecast, source = None, "local-fallback"
    if forecaster is not None:
        try:
            forecast = forecaster(product_name, ordered)
            source = "remote"
        except RemoteForecastError as e:
            logger.warning(f"⚠️ {e}. Using local forecast.")
    if forecast is None:
        forecast = local_forecast(ordered)

    return ProductAnalytics(
        product_name=product_name,
        series=ordered,
        total_sold=total_sold,
        avg_daily_sales=avg_daily_sales,
        current_inventory=current_inventory,
        days_of_stock=days_of_stock,
        trend=classify_trend(ordered),
        forecast=forecast,
        low_stock_alert=days_of_stock < settings.LOW_STOCK_DAYS,
        over_stock_alert=days_of_stock > settings.OVERSTOCK_DAYS,
        forecast_source=source,
    )


def analyze_batch(
    observations: Iterable[Observation],
    forecaster: Optional[Forecaster] = None,
    max_workers: int = None,
) -> list[ProductAnalytics]:
    """
    Groups a batch and computes every product in parallel.
    Results come back in the order each product first appears in the batch.
    """
    grouped = group_by_product(observations)
    if not grouped:
        return []

    workers = max(1, min(max_workers or settings.MAX_WORKERS, len(grouped)))
    logger.info(f"Analyzing {len(grouped)} product(s) with {workers} worker(s)...")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [
            pool.submit(compute_product_analytics, name, series, forecaster)
            for name, series in grouped.items()
        ]
        return [future.result() for future in futures]
