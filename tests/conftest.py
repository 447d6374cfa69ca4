from datetime import date, timedelta

import pytest

from inventory_dashboard.schemas import Observation


@pytest.fixture
def make_series():
    """Builds one observation per consecutive day from a list of units sold."""

    def _make(sold, inventory=0, product_name="Widget", start=date(2024, 1, 1)):
        return [
            Observation(
                date=start + timedelta(days=offset),
                product_name=product_name,
                inventory=inventory,
                sold=units,
            )
            for offset, units in enumerate(sold)
        ]

    return _make
