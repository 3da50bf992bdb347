"""
Test Suite Configuration

The sample catalog has three products over two pages:

    Alpha Lamp   revenue 1000, area 10, page 1  -> 100/sq in, SEI 222.2
    Beta Rug     revenue  500, area 10, page 1  ->  50/sq in, SEI 111.1
    Gamma Vase   revenue  300, area 20, page 2  ->  15/sq in, SEI  33.3

Catalog average is 1800 / 40 = 45 per square inch. The purchase log has
ann and bob buying both page-1 products (in opposite orders), cara buying
only the vase and dan buying a product that is not in the catalog.
"""
from types import SimpleNamespace
from typing import Any, Dict, List

import polars as pl
import pytest

from sqinch import schema
from sqinch.analysis.metrics import ProductMetricsEngine
from sqinch.config import Settings
from sqinch.config.settings import InsightSettings
from sqinch.ingestion.parsers import RecordParser


PRODUCTS_CSV = """Product Name,Product Sales Revenue,Units Sold,Square Inches,Page Number,Catalog Price
Alpha Lamp,1000,20,10,1,50
Beta Rug,500,5,10,1,100
Gamma Vase,300,10,20,2,30
"""

CUSTOMERS_CSV = """Customer Email,Product Name,Units Purchased,Revenue Generated,Age Range,Income Tier,Location
ann@example.com,Alpha Lamp,1,50,25-34,High,Urban
ann@example.com,Beta Rug,1,100,25-34,High,Urban
bob@example.com,Beta Rug,2,200,35-44,Middle,Suburban
bob@example.com,Alpha Lamp,1,50,35-44,Middle,Suburban
cara@example.com,Gamma Vase,1,30,45-54,High,Urban
dan@example.com,Unknown Chair,1,40,25-34,Low,Rural
"""


def make_products(rows: List[Dict[str, Any]]) -> pl.DataFrame:
    """Typed product frame from partial rows (missing fields default sensibly)"""
    defaults = {
        schema.UNITS_SOLD: 1,
        schema.PAGE_NUMBER: 1,
        schema.CATALOG_PRICE: 10.0,
    }
    return pl.DataFrame(
        [{**defaults, **row} for row in rows],
        schema=schema.PRODUCT_SCHEMA,
        strict=False,
    )


def make_customers(rows: List[Dict[str, Any]]) -> pl.DataFrame:
    """Typed purchase-log frame from partial rows"""
    defaults = {
        schema.UNITS_PURCHASED: 1,
        schema.AGE_RANGE: "25-34",
        schema.INCOME_TIER: "Middle",
        schema.LOCATION: "Urban",
    }
    return pl.DataFrame(
        [{**defaults, **row} for row in rows],
        schema=schema.CUSTOMER_SCHEMA,
        strict=False,
    )


class FakeMessages:
    """Stands in for ``AsyncAnthropic().messages``"""

    def __init__(self, text: str = "Reallocate space to Alpha Lamp.", error: Exception = None):
        self.text = text
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.text)])


class FakeAnthropic:
    def __init__(self, **kwargs):
        self.messages = FakeMessages(**kwargs)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
        insights=InsightSettings(enabled=False),
    )


@pytest.fixture
def insight_settings() -> InsightSettings:
    """Narratives enabled with a dummy key"""
    return InsightSettings(enabled=True, anthropic_api_key="test-key")


@pytest.fixture
def fake_client() -> FakeAnthropic:
    return FakeAnthropic()


@pytest.fixture
def products_csv() -> str:
    return PRODUCTS_CSV


@pytest.fixture
def customers_csv() -> str:
    return CUSTOMERS_CSV


@pytest.fixture
def sample_products_df() -> pl.DataFrame:
    """Parsed sample catalog"""
    return RecordParser().parse_products(PRODUCTS_CSV)[0]


@pytest.fixture
def sample_customers_df() -> pl.DataFrame:
    """Parsed sample purchase log"""
    return RecordParser().parse_customers(CUSTOMERS_CSV)[0]


@pytest.fixture
def enriched_products_df(sample_products_df) -> pl.DataFrame:
    """Sample catalog with efficiency metrics"""
    return ProductMetricsEngine().enrich(sample_products_df)


@pytest.fixture
def products_factory():
    """Build a typed product frame from partial rows"""
    return make_products


@pytest.fixture
def customers_factory():
    """Build a typed purchase-log frame from partial rows"""
    return make_customers


@pytest.fixture
def anthropic_factory():
    """Build a fake Anthropic client with a given reply or error"""
    return FakeAnthropic
