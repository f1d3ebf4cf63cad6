"""
Derived tables for presenting evaluations: capacity utilization,
bottlenecks, a side-by-side comparison of saved scenarios, and the inbound
supply exposure of each DC.

All functions return pandas DataFrames built from MetricsReport values or
the lane topology; nothing here re-runs the evaluator.
"""

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from planner.evaluator import RISK_SCALE, MetricsReport
from planner.network import Network
from planner.topology import NetworkGraph

# DCs carry no capacity in the reference data; utilization is shown
# against this nominal ceiling.
DC_CAPACITY_CEILING = 999_999
BOTTLENECK_THRESHOLD = 0.85

LOAD_COLUMNS = ["kind", "id", "name", "load", "capacity", "utilization"]
COMPARE_COLUMNS = ["snapshot_id", "label", "objective", "cost", "otif",
                   "risk_score", "delta", "pct_delta", "is_baseline"]
SUPPLY_COLUMNS = ["dc_id", "region", "laned_plants", "plants_by_region", "single_source_plant"]


@dataclass(frozen=True)
class ScenarioSnapshot:
    """A saved evaluation, identified by snapshot_id."""
    snapshot_id: str
    report: MetricsReport
    label: Optional[str] = None


def compute_loads(network: Network, report: MetricsReport) -> pd.DataFrame:
    """Plant and DC loads (post-clamp) with capacity and utilization.

    One row per plant in network order, then one per DC.
    """
    rows = []
    for plant in network.plants:
        load = report.plant_load.get(plant.plant_id, 0.0)
        rows.append({
            "kind": "plant",
            "id": plant.plant_id,
            "name": plant.name,
            "load": load,
            "capacity": plant.capacity,
            "utilization": load / plant.capacity if plant.capacity > 0 else 0.0,
        })
    for dc in network.dcs:
        load = report.delivered_by_dc.get(dc.dc_id, 0.0)
        rows.append({
            "kind": "dc",
            "id": dc.dc_id,
            "name": dc.name,
            "load": load,
            "capacity": DC_CAPACITY_CEILING,
            "utilization": load / DC_CAPACITY_CEILING,
        })
    return pd.DataFrame(rows, columns=LOAD_COLUMNS)


def bottlenecks(loads: pd.DataFrame, threshold: float = BOTTLENECK_THRESHOLD) -> pd.DataFrame:
    """Rows of a compute_loads() table at or above threshold, highest first."""
    hot = loads[loads["utilization"] >= threshold]
    return hot.sort_values("utilization", ascending=False, kind="stable").reset_index(drop=True)


def _objective(report: MetricsReport, risk_weight: float) -> float:
    return report.cost + risk_weight * report.risk_score * RISK_SCALE


def compare_scenarios(
    snapshots: list[ScenarioSnapshot],
    risk_weight: float,
    baseline_id: Optional[str] = None,
) -> pd.DataFrame:
    """
    Compare saved scenarios against a baseline.

    The objective of every snapshot is recomputed with the given (current)
    risk weight, so snapshots saved under different weights are comparable.
    delta is objective - baseline objective; pct_delta is delta as a
    percentage of the baseline objective (0 when that objective is 0).

    Args:
        snapshots: Saved snapshots in display order.
        risk_weight: Risk weight to apply to every snapshot.
        baseline_id: snapshot_id of the baseline; defaults to the first.

    Raises:
        KeyError: If baseline_id names no snapshot.
    """
    if not snapshots:
        return pd.DataFrame(columns=COMPARE_COLUMNS)

    if baseline_id is None:
        baseline_id = snapshots[0].snapshot_id
    baseline = next((s for s in snapshots if s.snapshot_id == baseline_id), None)
    if baseline is None:
        raise KeyError(f"Unknown baseline snapshot: {baseline_id}")
    base_obj = _objective(baseline.report, risk_weight)

    rows = []
    for snap in snapshots:
        obj = _objective(snap.report, risk_weight)
        delta = obj - base_obj
        rows.append({
            "snapshot_id": snap.snapshot_id,
            "label": snap.label or snap.snapshot_id,
            "objective": obj,
            "cost": snap.report.cost,
            "otif": snap.report.otif,
            "risk_score": snap.report.risk_score,
            "delta": delta,
            "pct_delta": delta / base_obj * 100 if base_obj else 0.0,
            "is_baseline": snap.snapshot_id == baseline_id,
        })
    return pd.DataFrame(rows, columns=COMPARE_COLUMNS)


def supply_summary(network: Network, graph: Optional[NetworkGraph] = None) -> pd.DataFrame:
    """Inbound supply exposure per DC, one row per DC in network order.

    laned_plants counts plants with a lane into the DC, plants_by_region
    breaks that count down by plant region, and single_source_plant names
    the plant whose outage would leave the DC with no inbound lane (empty
    when the DC has more than one feeder).
    """
    if graph is None:
        graph = NetworkGraph(network)

    stranded_by: dict[str, str] = {}
    for node in graph.get_nodes_by_type("plant"):
        plant_id = graph.graph.nodes[node]["plant_id"]
        for dc_id in graph.impact_analysis(plant_id):
            stranded_by[dc_id] = plant_id

    rows = []
    for dc in network.dcs:
        diversity = graph.supply_diversity(dc.dc_id)
        rows.append({
            "dc_id": dc.dc_id,
            "region": dc.region,
            "laned_plants": sum(diversity.values()),
            "plants_by_region": diversity,
            "single_source_plant": stranded_by.get(dc.dc_id, ""),
        })
    return pd.DataFrame(rows, columns=SUPPLY_COLUMNS)
