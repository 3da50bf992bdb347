"""
Synthetic Data Generator

Generates a realistic catalog and purchase log for demos and testing.
Includes:
- Products laid out across catalog pages, with space and revenue
- Customers with age, income and location demographics
- Purchases drawn in proportion to product revenue
"""

from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import polars as pl
from faker import Faker

from sqinch import schema

# =============================================================================
# CONFIGURATION
# =============================================================================

PRODUCT_TYPES = [
    "Throw Pillow", "Table Lamp", "Area Rug", "Wall Clock", "Candle Set",
    "Serving Bowl", "Picture Frame", "Planter", "Blanket", "Mirror",
    "Vase", "Bookend Pair", "Storage Basket", "Cutting Board", "Tea Kettle",
]

AGE_RANGES = ["18-24", "25-34", "35-44", "45-54", "55-64", "65+"]
AGE_WEIGHTS = [0.08, 0.22, 0.25, 0.20, 0.15, 0.10]

INCOME_TIERS = ["Low", "Middle", "High"]
INCOME_WEIGHTS = [0.25, 0.50, 0.25]

LOCATIONS = ["Urban", "Suburban", "Rural"]
LOCATION_WEIGHTS = [0.35, 0.45, 0.20]

PRODUCTS_PER_PAGE = 4


# =============================================================================
# GENERATORS
# =============================================================================

class CatalogGenerator:
    """Generate catalog product records"""

    def __init__(self, seed: int = 42):
        self.fake = Faker()
        self.fake.seed_instance(seed)
        self.rng = np.random.default_rng(seed)

    def _product_names(self, n: int) -> List[str]:
        names = []
        seen = set()
        while len(names) < n:
            name = f"{self.fake.color_name()} {self.rng.choice(PRODUCT_TYPES)}"
            if name in seen:
                name = f"{name} {len(names) + 1}"
            seen.add(name)
            names.append(name)
        return names

    def generate(self, n: int = 40) -> pl.DataFrame:
        """Generate n products, PRODUCTS_PER_PAGE to a page"""
        square_inches = np.round(self.rng.uniform(8, 120, n), 1)
        # Lognormal revenue density gives a long-tailed SEI spread
        revenue_per_sq_in = self.rng.lognormal(mean=3.5, sigma=0.6, size=n)
        revenue = np.round(square_inches * revenue_per_sq_in, 2)
        price = np.round(self.rng.uniform(15, 250, n), 2)
        units = np.maximum(np.round(revenue / price), 1).astype(np.int64)

        return pl.DataFrame({
            schema.PRODUCT_NAME: self._product_names(n),
            schema.PRODUCT_REVENUE: revenue,
            schema.UNITS_SOLD: units,
            schema.SQUARE_INCHES: square_inches,
            schema.PAGE_NUMBER: np.arange(n, dtype=np.int64) // PRODUCTS_PER_PAGE + 1,
            schema.CATALOG_PRICE: price,
        })


class PurchaseGenerator:
    """Generate purchase-log records for an existing catalog"""

    def __init__(self, products: pl.DataFrame, seed: int = 42):
        self.fake = Faker()
        self.fake.seed_instance(seed)
        self.rng = np.random.default_rng(seed)

        self.product_names = products[schema.PRODUCT_NAME].to_list()
        self.prices = products[schema.CATALOG_PRICE].to_numpy()
        revenue = products[schema.PRODUCT_REVENUE].to_numpy()
        self.weights = revenue / revenue.sum()

    def generate(self, n_customers: int = 200, mean_purchases: float = 2.5) -> pl.DataFrame:
        """Generate purchases for n_customers, at least one each"""
        rows = []

        for _ in range(n_customers):
            email = self.fake.unique.email()
            age_range = self.rng.choice(AGE_RANGES, p=AGE_WEIGHTS)
            income_tier = self.rng.choice(INCOME_TIERS, p=INCOME_WEIGHTS)
            location = self.rng.choice(LOCATIONS, p=LOCATION_WEIGHTS)

            n_purchases = 1 + self.rng.poisson(mean_purchases - 1)
            picks = self.rng.choice(len(self.product_names), size=n_purchases, p=self.weights)

            for idx in picks:
                units = int(self.rng.integers(1, 4))
                rows.append({
                    schema.CUSTOMER_EMAIL: email,
                    schema.PRODUCT_NAME: self.product_names[idx],
                    schema.UNITS_PURCHASED: units,
                    schema.REVENUE_GENERATED: round(units * float(self.prices[idx]), 2),
                    schema.AGE_RANGE: str(age_range),
                    schema.INCOME_TIER: str(income_tier),
                    schema.LOCATION: str(location),
                })

        return pl.DataFrame(rows, schema=schema.CUSTOMER_SCHEMA)


class DataGenerator:
    """Generate and save a matching catalog and purchase log"""

    def __init__(self, output_dir: Optional[str] = None, seed: int = 42):
        self.output_dir = Path(output_dir) if output_dir else Path("data/generated")
        self.seed = seed

    def generate_all(
        self,
        n_products: int = 40,
        n_customers: int = 200,
        save: bool = True,
    ) -> Dict[str, pl.DataFrame]:
        """
        Generate both datasets.

        Returns:
            Dict with "products" and "customers" frames
        """
        products = CatalogGenerator(self.seed).generate(n_products)
        customers = PurchaseGenerator(products, self.seed).generate(n_customers)

        data = {"products": products, "customers": customers}
        if save:
            self._save_data(data)
        return data

    def _save_data(self, data: Dict[str, pl.DataFrame]) -> None:
        """Save datasets as CSV"""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        for name, df in data.items():
            df.write_csv(self.output_dir / f"{name}.csv")
