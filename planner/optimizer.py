"""
Allocation Optimizer — greedy construction and exhaustive enumeration.

Two ways to propose an allocation:

  optimize_greedy()  — builds an allocation the way a planner would by hand:
      fill home-region demand from the nearest home plants by ground; cover
      the secondary region from the contract partner first, then spill to
      the nearest other plants by ocean; fall back to air if service is
      still short. A single local-improvement sweep then tries to downgrade
      each air edge into the secondary DC back to ocean.

  enumerate_best()   — depth-first search over every (supplier × site × mode)
      pick for every demand bucket. Each complete assignment is evaluated;
      the feasible one (OTIF ≥ service target) with the strictly lowest
      objective wins. There is no pruning, so the search is
      (plants × DCs × modes) ** buckets evaluations — 18² = 324 for the
      shipped network. Not suitable for a larger network as-is.

Both are deterministic: same inputs, same result.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from planner.evaluator import MetricsReport, evaluate
from planner.network import EdgeKey, Network, Plant, TransportMode
from planner.scenario import Levers, Pick, ScenarioState, assignment_to_scenario
from planner.topology import NetworkGraph

logger = logging.getLogger(__name__)

# Branching order for modes in the enumerator.
ENUMERATION_MODES = (TransportMode.AIR, TransportMode.GROUND, TransportMode.OCEAN)


@dataclass(frozen=True)
class BestSolution:
    """Container for enumerator output."""
    assignment: dict[str, Pick]         # region -> pick
    scenario: ScenarioState
    report: MetricsReport
    candidates_visited: int = 0         # complete assignments evaluated
    feasible_candidates: int = 0        # of which met the service target

    @property
    def objective(self) -> float:
        return self.report.objective


# ═══════════════════════════════════════════════════════════════════════════════
# GREEDY CONSTRUCTION + LOCAL IMPROVEMENT
# ═══════════════════════════════════════════════════════════════════════════════

class _AllocationBuilder:
    """Accumulates allocation/mode choices while tracking plant capacity."""

    def __init__(self):
        self.allocation: dict[EdgeKey, float] = {}
        self.modes: dict[EdgeKey, TransportMode] = {}

    def used(self, plant_id: str) -> float:
        return sum(q for edge, q in self.allocation.items() if edge.plant_id == plant_id)

    def available(self, plant: Plant) -> float:
        return max(0, plant.capacity - self.used(plant.plant_id))

    def allocate(self, plant: Plant, dc_id: str, units: float, mode: TransportMode):
        edge = EdgeKey(plant.plant_id, dc_id)
        self.allocation[edge] = self.allocation.get(edge, 0) + units
        self.modes[edge] = mode

    def fill(self, plants: list[Plant], dc_id: str, remaining: float, mode: TransportMode) -> float:
        """Fill plants in order up to their remaining capacity. Returns unmet units."""
        for plant in plants:
            if remaining <= 0:
                break
            take = min(self.available(plant), remaining)
            if take > 0:
                self.allocate(plant, dc_id, take, mode)
                remaining -= take
        return remaining


def optimize_greedy(
    network: Network,
    levers: Levers,
    home_region: str = "US",
    secondary_region: str = "EU",
    partner_plant_id: str = "CMO_EU",
    strict_lanes: bool = False,
) -> ScenarioState:
    """
    Construct an allocation greedily, then run one local-improvement sweep.

    Args:
        network: Reference data.
        levers: Policy levers carried into the returned scenario.
        home_region: Region served from its own plants by ground.
        secondary_region: Region served by the partner plant, then by spill.
        partner_plant_id: Contract plant preferred for the secondary region.
        strict_lanes: Passed through to evaluate().

    Returns:
        ScenarioState with the constructed allocation, modes and levers.
    """
    graph = NetworkGraph(network)
    demand = network.demand_by_region()
    builder = _AllocationBuilder()

    # ── 1. Home region: home plants, nearest first, ground ───────────────
    home_dc = network.dc_for_region(home_region)
    home_plant_ids = {p.plant_id for p in network.plants_in_region(home_region)}
    home_plants = graph.plants_by_distance(home_dc.dc_id, plant_ids=home_plant_ids)
    remaining_home = builder.fill(home_plants, home_dc.dc_id,
                                  demand.get(home_region, 0), TransportMode.GROUND)

    # ── 2. Secondary region: partner plant first ─────────────────────────
    secondary_dc = network.dc_for_region(secondary_region)
    remaining_secondary = demand.get(secondary_region, 0)
    partner = next((p for p in network.plants if p.plant_id == partner_plant_id), None)
    if partner is not None and network.has_lane(EdgeKey(partner.plant_id, secondary_dc.dc_id)):
        remaining_secondary = builder.fill([partner], secondary_dc.dc_id,
                                           remaining_secondary, TransportMode.GROUND)

    # ── 3. Spill the rest to any other laned plant, nearest first, ocean ─
    spill_ids = {p.plant_id for p in network.plants if p.plant_id != partner_plant_id}
    spill_plants = graph.plants_by_distance(secondary_dc.dc_id, plant_ids=spill_ids)
    remaining_secondary = builder.fill(spill_plants, secondary_dc.dc_id,
                                       remaining_secondary, TransportMode.OCEAN)

    # ── 4. Still short of target with demand unmet: re-route by air ──────
    scenario = ScenarioState(dict(builder.allocation), dict(builder.modes), levers)
    report = evaluate(network, scenario, strict_lanes=strict_lanes)
    if report.otif < levers.service_target and remaining_secondary > 0:
        remaining_secondary = builder.fill(spill_plants, secondary_dc.dc_id,
                                           remaining_secondary, TransportMode.AIR)
        scenario = ScenarioState(dict(builder.allocation), dict(builder.modes), levers)
        report = evaluate(network, scenario, strict_lanes=strict_lanes)

    # ── 5. Local improvement: air -> ocean into the secondary DC ─────────
    scenario, report = improve_modes(network, scenario, secondary_dc.dc_id, strict_lanes)

    logger.info(
        "Greedy allocation: OTIF %.3f, objective %.0f, unmet home %.0f / secondary %.0f",
        report.otif, report.objective, remaining_home, remaining_secondary,
    )
    return scenario


def improve_modes(
    network: Network,
    scenario: ScenarioState,
    dc_id: str,
    strict_lanes: bool = False,
) -> tuple[ScenarioState, MetricsReport]:
    """Try downgrading each air edge into dc_id to ocean, once each.

    A downgrade is kept only if OTIF stays at or above the service target and
    the objective does not go up. Single sweep in allocation order, so the
    result is a local optimum. Returns the (possibly unchanged) scenario and
    its report.
    """
    target = scenario.levers.service_target
    report = evaluate(network, scenario, strict_lanes=strict_lanes)
    for edge in list(scenario.allocation):
        if edge.dc_id != dc_id or scenario.mode_for(edge) != TransportMode.AIR:
            continue
        trial = scenario.with_mode(edge, TransportMode.OCEAN)
        trial_report = evaluate(network, trial, strict_lanes=strict_lanes)
        if trial_report.otif >= target and trial_report.objective <= report.objective:
            scenario, report = trial, trial_report
    return scenario, report


# ═══════════════════════════════════════════════════════════════════════════════
# EXHAUSTIVE ENUMERATION
# ═══════════════════════════════════════════════════════════════════════════════

def enumerate_best(
    network: Network,
    levers: Levers,
    demand_multiplier: float = 1.0,
    strict_lanes: bool = False,
) -> Optional[BestSolution]:
    """
    Search every per-region (supplier, site, mode) pick and keep the best
    feasible one.

    Args:
        network: Reference data; its plants are the suppliers, its DCs the sites,
            and its demand regions the buckets.
        levers: Levers for evaluation (service target decides feasibility).
        demand_multiplier: Scales each region's demand before allocation.
        strict_lanes: Passed through to evaluate().

    Returns:
        BestSolution, or None when no assignment meets the service target.
    """
    buckets = network.regions()
    best: Optional[dict] = None
    visited = 0
    feasible = 0

    def dfs(idx: int, current: dict[str, Pick]):
        nonlocal best, visited, feasible
        if idx == len(buckets):
            scenario = assignment_to_scenario(network, current, levers, demand_multiplier)
            report = evaluate(network, scenario, strict_lanes=strict_lanes)
            visited += 1
            if report.feasible:
                feasible += 1
                if best is None or report.objective < best["report"].objective:
                    best = {"assignment": dict(current), "scenario": scenario, "report": report}
            return
        region = buckets[idx]
        for plant in network.plants:
            for dc in network.dcs:
                for mode in ENUMERATION_MODES:
                    current[region] = Pick(plant.plant_id, dc.dc_id, mode)
                    dfs(idx + 1, current)
        current.pop(region, None)

    dfs(0, {})

    if best is None:
        logger.warning("No feasible assignment among %d candidates", visited)
        return None

    logger.info("Best assignment: objective %.0f (%d of %d candidates feasible)",
                best["report"].objective, feasible, visited)
    return BestSolution(
        assignment=best["assignment"],
        scenario=best["scenario"],
        report=best["report"],
        candidates_visited=visited,
        feasible_candidates=feasible,
    )
