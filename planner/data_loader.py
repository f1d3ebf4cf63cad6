"""
Load the reference network CSVs and build a typed Network.

Loads 4 CSV files from data/ into pandas DataFrames, validates
the value ranges, and converts the rows into the frozen entities
of planner.network. Row order in the CSVs is the enumeration order used
by the evaluator and optimizer, so it is preserved as-is.
"""

import os
import pandas as pd

from planner.config import settings
from planner.network import DistributionCenter, Lane, Network, Plant, Product


class ReferenceData:
    """Loads all CSVs from data/ and builds the Network."""

    def __init__(self, data_dir=None):
        if data_dir is None:
            data_dir = settings.data_dir
        if data_dir is None:
            # Default: look for data/ relative to this file's parent directory
            data_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
        self._dir = data_dir
        self._load()

    def _load(self):
        # ── Load CSV files ────────────────────────────────────────────────
        self.products = pd.read_csv(os.path.join(self._dir, "products.csv"))
        self.plants = pd.read_csv(os.path.join(self._dir, "plants.csv"))
        self.dcs = pd.read_csv(os.path.join(self._dir, "dcs.csv"))
        self.lanes = pd.read_csv(os.path.join(self._dir, "lanes.csv"))

        # ── Validate ──────────────────────────────────────────────────────
        if (self.products["monthly_demand"] < 0).any():
            raise ValueError("products.csv: monthly_demand must be non-negative")
        if (self.plants["capacity"] < 0).any():
            raise ValueError("plants.csv: capacity must be non-negative")
        if not self.plants["uptime"].between(0, 1).all():
            raise ValueError("plants.csv: uptime must be in [0, 1]")
        if (self.plants["base_risk"] < 0).any():
            raise ValueError("plants.csv: base_risk must be non-negative")
        duplicated = self.lanes.duplicated(subset=["plant_id", "dc_id"])
        if duplicated.any():
            raise ValueError(f"lanes.csv: duplicate lanes {self.lanes[duplicated].values.tolist()}")

    # ── Network construction ─────────────────────────────────────────────────

    def build_network(self) -> Network:
        """Convert the DataFrames into a Network (rows kept in file order)."""
        demand: dict[str, dict[str, float]] = {}
        product_meta: dict[str, tuple[str, str]] = {}
        for _, row in self.products.iterrows():
            pid = row["product_id"]
            product_meta.setdefault(pid, (row["product_name"], row["unit"]))
            demand.setdefault(pid, {})[row["region"]] = float(row["monthly_demand"])

        products = tuple(
            Product(product_id=pid, name=name, unit=unit, monthly_demand=demand[pid])
            for pid, (name, unit) in product_meta.items()
        )
        plants = tuple(
            Plant(
                plant_id=row["plant_id"],
                name=row["plant_name"],
                region=row["region"],
                capacity=float(row["capacity"]),
                conversion_cost=float(row["conversion_cost"]),
                uptime=float(row["uptime"]),
                base_risk=float(row["base_risk"]),
            )
            for _, row in self.plants.iterrows()
        )
        dcs = tuple(
            DistributionCenter(dc_id=row["dc_id"], name=row["dc_name"], region=row["region"])
            for _, row in self.dcs.iterrows()
        )
        lanes = tuple(
            Lane(plant_id=row["plant_id"], dc_id=row["dc_id"], distance=float(row["distance"]))
            for _, row in self.lanes.iterrows()
        )
        return Network(products=products, plants=plants, dcs=dcs, lanes=lanes)
