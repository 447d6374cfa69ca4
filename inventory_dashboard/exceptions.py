class DashboardError(Exception):
    """Base class for errors raised by the dashboard core."""


class IngestionError(DashboardError):
    """The uploaded records could not produce a usable batch."""


class RemoteForecastError(DashboardError):
    """Calling or parsing the remote forecasting service failed."""

    def __init__(self, product_name: str, reason: str):
        self.product_name = product_name
        self.reason = reason
        super().__init__(f"Forecast request for '{product_name}' failed: {reason}")
