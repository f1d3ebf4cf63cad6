"""
What-if Planner Run
===================
Runs one full pass over the reference network with the configured levers:
greedy allocation, exhaustive best assignment, Monte Carlo trials and the
tornado sweep, then prints the summary tables.

Levers and run parameters come from PLANNER_* environment variables or a
.env file (see planner/config.py).

Usage: python scripts/run_planner.py
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from planner.config import settings
from planner.data_loader import ReferenceData
from planner.evaluator import evaluate
from planner.logger import setup_logger
from planner.montecarlo import run_trials
from planner.optimizer import enumerate_best, optimize_greedy
from planner.reporting import (
    ScenarioSnapshot, bottlenecks, compare_scenarios, compute_loads, supply_summary,
)
from planner.sensitivity import tornado


def main():
    logger = setup_logger()
    network = ReferenceData(settings.data_dir).build_network()
    params = settings.scenario_params()
    levers = params.to_levers()
    strict = settings.strict_lanes

    print("What-if Planner")
    print("=" * 40)

    # ── Greedy allocation ─────────────────────────────────────────────────
    greedy = optimize_greedy(
        network, levers,
        home_region=settings.home_region,
        secondary_region=settings.secondary_region,
        partner_plant_id=settings.partner_plant_id,
        strict_lanes=strict,
    )
    report = evaluate(network, greedy, strict_lanes=strict)
    print("\nGreedy allocation:")
    for edge, qty in greedy.allocation.items():
        print(f"  {str(edge):<28s} {qty:>10,.0f}  {greedy.mode_for(edge).value}")
    print(f"  OTIF {report.otif:.1%}  cost ${report.cost:,.0f}  objective ${report.objective:,.0f}")

    loads = compute_loads(network, report)
    hot = bottlenecks(loads)
    print("\nBottlenecks:", ", ".join(hot["id"]) if not hot.empty else "None")

    print("\nSupply exposure:")
    print(supply_summary(network).to_string(index=False))

    # ── Exhaustive best assignment ────────────────────────────────────────
    snapshots = [ScenarioSnapshot("greedy", report)]
    best = enumerate_best(network, levers, params.demand_multiplier, strict_lanes=strict)
    if best is None:
        print("\nNo assignment meets the service target.")
    else:
        print(f"\nBest assignment ({best.feasible_candidates}/{best.candidates_visited} feasible):")
        for region, pick in best.assignment.items():
            print(f"  {region:<4s} {pick.supplier_id} -> {pick.site_id} ({pick.mode.value})")
        snapshots.append(ScenarioSnapshot("best", best.report))

    print("\nComparison:")
    print(compare_scenarios(snapshots, levers.risk_weight).to_string(index=False))

    # ── Monte Carlo ───────────────────────────────────────────────────────
    summary = run_trials(network, greedy, settings.mc_trials, params.reliability_shock,
                         seed=settings.mc_seed, strict_lanes=strict)
    print(f"\nMonte Carlo ({settings.mc_trials} trials): "
          f"P(hit) {summary.probability_of_hitting_target:.1%}, "
          f"mean ${summary.mean_cost:,.0f}, p90 ${summary.p90_cost:,.0f}")

    # ── Tornado ───────────────────────────────────────────────────────────
    result = tornado(network, greedy, strict_lanes=strict)
    print("\nSensitivity (objective delta):")
    for row in result.rows:
        print(f"  {row.name:<24s} {row.delta:>+12,.0f}")

    logger.info("Run complete")


if __name__ == "__main__":
    main()
