"""
Scenario Evaluator — maps a scenario to cost, service, carbon and risk.

evaluate(network, scenario) is a pure function: it reads the reference
network and the scenario state, mutates neither, and returns a fresh
MetricsReport. The steps are:

  1. Capacity clamp — walk the allocation in order and trim whatever pushes
     a plant past its capacity. Trimmed volume is dropped, NOT moved to
     another plant.
  2. Edge costs — conversion, transport (per-distance rate + fuel
     surcharge), lane carbon, and a risk accumulator per edge.
  3. Shortage — delivered volume per region vs demand.
  4. Overflow — if allowed, unmet demand is back-filled at a premium cost
     and carbon rate, with a service penalty instead of lost volume.
  5. OTIF — served fraction of demand minus the overflow penalty, in [0, 1].
  6. Objective — total cost + risk_weight * risk_score * 1000.
"""

import logging
from dataclasses import dataclass, field

from planner.network import MODES, EdgeKey, Network
from planner.scenario import ScenarioState

logger = logging.getLogger(__name__)

# Region risk addend by destination DC region; everything else uses the default.
REGION_RISK = {"EU": 0.012}
DEFAULT_REGION_RISK = 0.010

# Synthetic emergency fulfillment rates (per unit of shortage).
OVERFLOW_COST_PER_UNIT = 6.0
OVERFLOW_CO2_PER_UNIT = 0.5
OVERFLOW_PENALTY_PER_UNIT = 0.15

RISK_SCALE = 1_000


@dataclass(frozen=True)
class MetricsReport:
    """Read-only snapshot of one evaluation."""
    total_demand: float
    total_served: float
    otif: float
    cost: float
    conversion_cost: float
    transport_cost: float
    overflow_cost: float
    carbon: float                       # lane carbon + overflow carbon
    risk_score: float
    objective: float
    feasible: bool                      # otif >= service target
    overflow_penalty: float = 0.0
    allocation: dict[EdgeKey, float] = field(default_factory=dict)   # post-clamp
    plant_load: dict[str, float] = field(default_factory=dict)
    delivered_by_dc: dict[str, float] = field(default_factory=dict)
    shortage_by_region: dict[str, float] = field(default_factory=dict)
    served_by_region: dict[str, float] = field(default_factory=dict)


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def clamp_to_capacity(network: Network, allocation: dict[EdgeKey, float]) -> dict[EdgeKey, float]:
    """Return a copy of the allocation with plant capacity enforced.

    Edges are processed in allocation order. When an edge pushes its plant
    over capacity, that edge is reduced by the overage (never below 0) and
    the plant's running total is capped at capacity, so any later edge from
    the same plant is trimmed to 0.
    """
    clamped = dict(allocation)
    cap_used: dict[str, float] = {}
    for edge in clamped:
        plant = network.get_plant(edge.plant_id)
        cap_used[plant.plant_id] = cap_used.get(plant.plant_id, 0) + clamped[edge]
        if cap_used[plant.plant_id] > plant.capacity:
            over = cap_used[plant.plant_id] - plant.capacity
            clamped[edge] = max(0, clamped[edge] - over)
            cap_used[plant.plant_id] = plant.capacity
            logger.debug("Trimmed %s by %.1f units (plant capacity %.1f)",
                         edge, over, plant.capacity)
    return clamped


def evaluate(
    network: Network,
    scenario: ScenarioState,
    strict_lanes: bool = False,
) -> MetricsReport:
    """Evaluate a scenario against the reference network.

    Args:
        network: Reference data (plants, DCs, lanes, demand).
        scenario: Allocation, modes and levers to evaluate.
        strict_lanes: If True, an allocated edge without a lane raises
            MissingLaneError instead of being routed at distance 0.

    Returns:
        MetricsReport with cost breakdown, OTIF, carbon, risk and objective.
    """
    levers = scenario.levers

    # ── 1. Capacity clamp ────────────────────────────────────────────────
    allocation = clamp_to_capacity(network, scenario.allocation)

    # ── 2. Edge costs ────────────────────────────────────────────────────
    delivered_by_dc = {dc.dc_id: 0.0 for dc in network.dcs}
    plant_load: dict[str, float] = {}
    conversion_cost = 0.0
    transport_cost = 0.0
    carbon = 0.0
    risk_score = 0.0

    for edge, qty in allocation.items():
        if qty <= 0:
            continue
        plant = network.get_plant(edge.plant_id)
        dc = network.get_dc(edge.dc_id)
        distance = network.lane_distance(edge, strict=strict_lanes)
        mode = MODES[scenario.mode_for(edge)]

        plant_load[plant.plant_id] = plant_load.get(plant.plant_id, 0) + qty
        delivered_by_dc[dc.dc_id] += qty

        conversion_cost += qty * plant.conversion_cost
        transport_cost += qty * (mode.unit_cost_per_distance * distance + levers.fuel_surcharge)
        carbon += qty * (mode.co2_per_distance * distance)
        region_risk = REGION_RISK.get(dc.region, DEFAULT_REGION_RISK)
        risk_score += qty * (plant.base_risk + mode.base_risk + region_risk) * (1 - plant.uptime) * 100

    # ── 3. Shortage per region ───────────────────────────────────────────
    demand = network.demand_by_region()
    shortage_by_region = {}
    served_by_region = {}
    for region, region_demand in demand.items():
        delivered = sum(delivered_by_dc[dc.dc_id] for dc in network.dcs_in_region(region))
        shortage_by_region[region] = max(0, region_demand - delivered)
        served_by_region[region] = delivered

    # ── 4. Overflow back-fill ────────────────────────────────────────────
    overflow_cost = 0.0
    overflow_carbon = 0.0
    overflow_penalty = 0.0
    if levers.overflow_allowed:
        for region, shortage in shortage_by_region.items():
            if shortage <= 0:
                continue
            overflow_cost += shortage * OVERFLOW_COST_PER_UNIT
            overflow_carbon += shortage * OVERFLOW_CO2_PER_UNIT
            overflow_penalty += shortage * OVERFLOW_PENALTY_PER_UNIT
            served_by_region[region] += shortage

    # ── 5. OTIF ──────────────────────────────────────────────────────────
    # Served is capped per region so over-delivery cannot lift the numerator.
    total_demand = sum(demand.values())
    total_served = sum(min(served_by_region[r], demand[r]) for r in demand)
    if total_demand > 0:
        otif = clamp(total_served / total_demand - overflow_penalty / total_demand, 0.0, 1.0)
    else:
        otif = 0.0

    # ── 6. Cost and objective ────────────────────────────────────────────
    cost = (conversion_cost + transport_cost + overflow_cost
            + levers.carbon_price * (carbon + overflow_carbon))
    objective = cost + levers.risk_weight * risk_score * RISK_SCALE

    return MetricsReport(
        total_demand=total_demand,
        total_served=total_served,
        otif=otif,
        cost=cost,
        conversion_cost=conversion_cost,
        transport_cost=transport_cost,
        overflow_cost=overflow_cost,
        carbon=carbon + overflow_carbon,
        risk_score=risk_score,
        objective=objective,
        feasible=otif >= levers.service_target,
        overflow_penalty=overflow_penalty,
        allocation=allocation,
        plant_load=plant_load,
        delivered_by_dc=delivered_by_dc,
        shortage_by_region=shortage_by_region,
        served_by_region=served_by_region,
    )
