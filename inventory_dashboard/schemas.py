import datetime
from typing import Literal
from pydantic import BaseModel, Field

Trend = Literal["up", "down", "stable"]
ForecastSource = Literal["remote", "local-fallback"]


class Observation(BaseModel):
    """
    One dated (product, inventory level, units sold) sample from an upload.
    The aliases match the column names used on the wire to the forecasting service.
    """

    date: datetime.date = Field(..., alias="Date")
    product_name: str = Field(..., min_length=1, alias="Product Name")
    inventory: int = Field(..., ge=0, alias="Inventory")
    sold: int = Field(..., ge=0, alias="Sold")

    class Config:
        populate_by_name = True
        frozen = True


class ProductAnalytics(BaseModel):
    """
    The per-product output record handed to the presentation side.
    Built once per batch and never updated in place.
    """

    product_name: str = Field(..., alias="productName")
    series: list[Observation] = Field(default_factory=list, alias="data")
    total_sold: int = Field(default=0, alias="totalSold")
    avg_daily_sales: float = Field(default=0.0, alias="avgDailySales")
    current_inventory: int = Field(default=0, alias="currentInventory")
    days_of_stock: float = Field(default=0.0, alias="daysOfStock")
    trend: Trend = "stable"
    forecast: list[int] = Field(default_factory=list)
    low_stock_alert: bool = Field(default=False, alias="lowStockAlert")
    over_stock_alert: bool = Field(default=False, alias="overStockAlert")
    forecast_source: ForecastSource = Field(
        default="local-fallback", alias="forecastSource"
    )

    class Config:
        populate_by_name = True
        frozen = True


class DashboardSummary(BaseModel):
    """Headline KPIs for one batch."""

    total_products: int = Field(default=0, alias="totalProducts")
    low_stock_products: int = Field(default=0, alias="lowStockProducts")
    over_stock_products: int = Field(default=0, alias="overStockProducts")
    total_value: float = Field(default=0.0, alias="totalValue")
    avg_turnover: float = Field(default=0.0, alias="avgTurnover")

    class Config:
        populate_by_name = True
