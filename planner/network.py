"""
Network Model — typed reference data for the planning calculator.

Frozen dataclasses for each entity type (Product, Plant, DistributionCenter,
Lane), the fixed transport-mode table, and a Network bundle with lookup
methods used by the evaluator, optimizer, sampler, and sensitivity sweep.

Reference data is loaded once (see data_loader.py) and never mutated. The
Monte Carlo sampler needs perturbed capacities and demand; it gets them from
with_plant_capacities() / with_demand(), which build a NEW Network and leave
the original untouched.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# TRANSPORT MODES
# ═══════════════════════════════════════════════════════════════════════════════

class TransportMode(str, Enum):
    GROUND = "ground"
    AIR = "air"
    OCEAN = "ocean"


@dataclass(frozen=True)
class ModeProfile:
    """Per-distance cost and CO2 coefficients for one transport mode."""
    name: str
    unit_cost_per_distance: float
    co2_per_distance: float
    base_risk: float
    lead_time_days: int


# Fixed table; the core contract does not allow adding modes.
MODES = {
    TransportMode.GROUND: ModeProfile("Ground", 0.002, 0.0005, 0.01, 3),
    TransportMode.AIR:    ModeProfile("Air",    0.020, 0.0100, 0.03, 2),
    TransportMode.OCEAN:  ModeProfile("Ocean",  0.005, 0.0020, 0.02, 16),
}


# ═══════════════════════════════════════════════════════════════════════════════
# ENTITY DATACLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class EdgeKey(NamedTuple):
    """Allocation edge: plant -> distribution center."""
    plant_id: str
    dc_id: str

    def __str__(self):
        return f"{self.plant_id}->{self.dc_id}"


@dataclass(frozen=True)
class Product:
    """A product with monthly demand per region code."""
    product_id: str
    name: str
    unit: str
    monthly_demand: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class Plant:
    """A manufacturing (fill/finish) site."""
    plant_id: str
    name: str
    region: str
    capacity: float
    conversion_cost: float
    uptime: float
    base_risk: float

    def is_in_region(self, region: str) -> bool:
        return self.region == region


@dataclass(frozen=True)
class DistributionCenter:
    """A distribution center. Capacity is unconstrained in the model."""
    dc_id: str
    name: str
    region: str

    def is_in_region(self, region: str) -> bool:
        return self.region == region


@dataclass(frozen=True)
class Lane:
    """A directed plant -> DC route with a distance."""
    plant_id: str
    dc_id: str
    distance: float

    @property
    def key(self) -> EdgeKey:
        return EdgeKey(self.plant_id, self.dc_id)


class MissingLaneError(KeyError):
    """Raised by a strict lane lookup when no lane exists for an edge."""


# ═══════════════════════════════════════════════════════════════════════════════
# NETWORK BUNDLE
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Network:
    """Products, plants, distribution centers and lanes.

    Tuples keep a stable order everywhere the network is enumerated
    (plants for the sampler, regions for the enumerator, etc.).
    """
    products: tuple[Product, ...]
    plants: tuple[Plant, ...]
    dcs: tuple[DistributionCenter, ...]
    lanes: tuple[Lane, ...]

    # ── Entity lookups ─────────────────────────────────────────────────────────

    def get_plant(self, plant_id: str) -> Plant:
        """Return the Plant with this ID. Raises KeyError if unknown."""
        for p in self.plants:
            if p.plant_id == plant_id:
                return p
        raise KeyError(f"Unknown plant {plant_id}")

    def get_dc(self, dc_id: str) -> DistributionCenter:
        """Return the DistributionCenter with this ID. Raises KeyError if unknown."""
        for dc in self.dcs:
            if dc.dc_id == dc_id:
                return dc
        raise KeyError(f"Unknown distribution center {dc_id}")

    def get_lane(self, edge: EdgeKey) -> Optional[Lane]:
        for lane in self.lanes:
            if lane.plant_id == edge.plant_id and lane.dc_id == edge.dc_id:
                return lane
        return None

    def has_lane(self, edge: EdgeKey) -> bool:
        return self.get_lane(edge) is not None

    def lane_distance(self, edge: EdgeKey, strict: bool = False) -> float:
        """Distance for an edge.

        A missing lane is reported as distance 0 unless strict=True, in which
        case MissingLaneError is raised. Every distance read in the package
        goes through here.
        """
        lane = self.get_lane(edge)
        if lane is not None:
            return lane.distance
        if strict:
            raise MissingLaneError(f"No lane for {edge}")
        logger.debug("No lane for %s; routing at distance 0", edge)
        return 0.0

    def plants_in_region(self, region: str) -> list[Plant]:
        return [p for p in self.plants if p.is_in_region(region)]

    def dcs_in_region(self, region: str) -> list[DistributionCenter]:
        return [dc for dc in self.dcs if dc.is_in_region(region)]

    def dc_for_region(self, region: str) -> DistributionCenter:
        """The (first) DC serving a region. Raises KeyError if none."""
        dcs = self.dcs_in_region(region)
        if not dcs:
            raise KeyError(f"No distribution center in region {region}")
        return dcs[0]

    # ── Demand ─────────────────────────────────────────────────────────────────

    def regions(self) -> list[str]:
        """Demand regions in first-seen order across products."""
        seen = []
        for product in self.products:
            for region in product.monthly_demand:
                if region not in seen:
                    seen.append(region)
        return seen

    def demand_by_region(self) -> dict[str, float]:
        """Total monthly demand per region, summed across products."""
        totals = {region: 0.0 for region in self.regions()}
        for product in self.products:
            for region, qty in product.monthly_demand.items():
                totals[region] += qty
        return totals

    # ── Perturbed copies (used by the Monte Carlo sampler) ─────────────────────

    def with_plant_capacities(self, capacities: dict[str, float]) -> "Network":
        """Return a copy with some plant capacities replaced."""
        plants = tuple(
            replace(p, capacity=capacities[p.plant_id]) if p.plant_id in capacities else p
            for p in self.plants
        )
        return replace(self, plants=plants)

    def with_demand(self, demand: dict[str, dict[str, float]]) -> "Network":
        """Return a copy with product demand replaced.

        demand maps product_id -> {region: qty}; products not listed keep
        their demand.
        """
        products = tuple(
            replace(pr, monthly_demand=dict(demand[pr.product_id]))
            if pr.product_id in demand else pr
            for pr in self.products
        )
        return replace(self, products=products)
