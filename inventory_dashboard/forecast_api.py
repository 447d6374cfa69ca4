import logging
import math
import numbers
from typing import Any

import requests

from . import settings
from .analytics import round_half_up
from .exceptions import RemoteForecastError
from .schemas import Observation

logger = logging.getLogger(__name__)

# Point-forecast keys accepted in object-shaped forecast elements, in preference order.
POINT_FORECAST_KEYS = ("yhat", "predicted_sales")


def build_forecast_payload(product_name: str, series: list[Observation]) -> dict:
    """Shapes one product's sales history into the request body the service expects."""
    return {
        "sales_data": [
            obs.model_dump(mode="json", by_alias=True, include={"date", "sold"})
            for obs in series
        ],
        "product_name": product_name,
    }


def _finite_number(value: Any) -> float | None:
    """Returns a finite float, or None for booleans, non-numbers, NaN, infinities and overflow."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _point_value(element: Any) -> float | None:
    if isinstance(element, dict):
        for key in POINT_FORECAST_KEYS:
            value = _finite_number(element.get(key))
            if value is not None:
                return value
        return None
    return _finite_number(element)


def parse_forecast_response(product_name: str, body: Any) -> list[int]:
    """
    Extracts the forecast values from a response body.
    Each element is a plain number or an object carrying `yhat` / `predicted_sales`.
    """
    if not isinstance(body, dict):
        raise RemoteForecastError(product_name, "response body is not a JSON object")

    raw_forecast = body.get("forecast")
    if not isinstance(raw_forecast, list) or not raw_forecast:
        raise RemoteForecastError(product_name, "response has no 'forecast' list")

    forecast = []
    for index, element in enumerate(raw_forecast):
        value = _point_value(element)
        if value is None:
            raise RemoteForecastError(
                product_name, f"unusable forecast element at index {index}: {element!r}"
            )
        forecast.append(max(0, round_half_up(value)))
    return forecast


class ForecastClient:
    """
    Calls the remote forecasting service, one POST per product.
    Instances are callable so they can be passed straight to analyze_batch().
    """

    def __init__(self, base_url: str = None, timeout: float = None):
        self.base_url = (base_url or settings.FORECAST_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.FORECAST_TIMEOUT_SECONDS

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/forecast"

    def __call__(self, product_name: str, series: list[Observation]) -> list[int]:
        return self.fetch_forecast(product_name, series)

    def fetch_forecast(self, product_name: str, series: list[Observation]) -> list[int]:
        payload = build_forecast_payload(product_name, series)
        logger.debug(f"🚀 Requesting forecast for '{product_name}' from {self.endpoint}")

        try:
            response = requests.post(self.endpoint, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.RequestException as e:
            raise RemoteForecastError(product_name, str(e)) from e
        except ValueError as e:
            raise RemoteForecastError(product_name, f"invalid JSON body ({e})") from e

        forecast = parse_forecast_response(product_name, body)
        logger.debug(f"✅ Received {len(forecast)} forecast value(s) for '{product_name}'.")
        return forecast
