"""
Scenario state: policy levers, the chosen allocation, and assignment picks.

A ScenarioState is what the user edits (allocation per plant->DC edge, a
transport mode per edge, policy levers). It is a frozen value; every helper
that "changes" it returns a new state with freshly copied mappings, so a
perturbed scenario never shares a dict with the one it came from.
"""

import math
from dataclasses import dataclass, field, replace

from planner.network import EdgeKey, Network, TransportMode


@dataclass(frozen=True)
class Levers:
    """Scenario-wide policy parameters.

    Ranges are enforced at the input boundary (schemas.LeverInput), not here:
    the sensitivity sweep legitimately produces values outside the UI ranges.
    """
    service_target: float = 0.95
    risk_weight: float = 0.002
    carbon_price: float = 0.02
    demand_volatility: float = 0.10
    fuel_surcharge: float = 0.02
    overflow_allowed: bool = True

    def with_changes(self, **changes) -> "Levers":
        return replace(self, **changes)


@dataclass(frozen=True)
class ScenarioState:
    """Allocation + modes + levers for one what-if scenario.

    allocation: EdgeKey -> units. Insertion order is the enumeration order
                used by the capacity clamp.
    modes:      EdgeKey -> TransportMode. Edges without an entry ship by ground.
    """
    allocation: dict[EdgeKey, float] = field(default_factory=dict)
    modes: dict[EdgeKey, TransportMode] = field(default_factory=dict)
    levers: Levers = field(default_factory=Levers)

    def __post_init__(self):
        for edge, qty in self.allocation.items():
            if qty < 0:
                raise ValueError(f"Negative allocation {qty} on {edge}")

    def mode_for(self, edge: EdgeKey) -> TransportMode:
        return TransportMode(self.modes.get(edge, TransportMode.GROUND))

    def copy(self) -> "ScenarioState":
        return ScenarioState(
            allocation=dict(self.allocation),
            modes=dict(self.modes),
            levers=self.levers,
        )

    def with_levers(self, **changes) -> "ScenarioState":
        return ScenarioState(
            allocation=dict(self.allocation),
            modes=dict(self.modes),
            levers=self.levers.with_changes(**changes),
        )

    def with_mode(self, edge: EdgeKey, mode: TransportMode) -> "ScenarioState":
        modes = dict(self.modes)
        modes[edge] = mode
        return ScenarioState(
            allocation=dict(self.allocation),
            modes=modes,
            levers=self.levers,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# ASSIGNMENTS (one pick per demand bucket)
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Pick:
    """Supplier, site and mode chosen for one demand bucket (region)."""
    supplier_id: str
    site_id: str
    mode: TransportMode = TransportMode.GROUND

    @property
    def edge(self) -> EdgeKey:
        return EdgeKey(self.supplier_id, self.site_id)


def round_half_up(x: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(x + 0.5))


def assignment_to_scenario(
    network: Network,
    assignment: dict[str, Pick],
    levers: Levers,
    demand_multiplier: float = 1.0,
) -> ScenarioState:
    """Build a ScenarioState from per-region picks.

    Each region's demand (times demand_multiplier, rounded) is placed on the
    pick's edge. Regions sharing an edge add up; the edge takes the mode of
    the last region that picked it. Regions without a pick contribute nothing.
    """
    allocation: dict[EdgeKey, float] = {}
    modes: dict[EdgeKey, TransportMode] = {}
    demand = network.demand_by_region()
    for region in network.regions():
        pick = assignment.get(region)
        if pick is None:
            continue
        units = round_half_up(demand[region] * demand_multiplier)
        allocation[pick.edge] = allocation.get(pick.edge, 0) + units
        modes[pick.edge] = TransportMode(pick.mode)
    return ScenarioState(allocation=allocation, modes=modes, levers=levers)
