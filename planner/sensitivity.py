"""
Sensitivity Analyzer — one-factor "tornado" sweep over the policy levers.

Each entry in the perturbation menu changes a single lever on a copy of
the scenario; the copy is evaluated and compared with the unperturbed
objective. Rows come back sorted by |delta|, largest first. The sort is
stable, so equal magnitudes keep their menu order.
"""

from dataclasses import dataclass, field
from typing import Callable

from planner.evaluator import clamp, evaluate
from planner.network import Network
from planner.scenario import Levers, ScenarioState

SERVICE_TARGET_MIN = 0.80
SERVICE_TARGET_MAX = 0.99


@dataclass(frozen=True)
class SensitivityRow:
    name: str
    objective: float
    delta: float                        # perturbed objective - base objective


@dataclass(frozen=True)
class TornadoResult:
    base_objective: float
    rows: list[SensitivityRow] = field(default_factory=list)


def _service_target(step: float) -> Callable[[Levers], Levers]:
    return lambda lv: lv.with_changes(
        service_target=clamp(lv.service_target + step, SERVICE_TARGET_MIN, SERVICE_TARGET_MAX))


# (label, lever transform) in menu order.
PERTURBATIONS: list[tuple[str, Callable[[Levers], Levers]]] = [
    ("Service Target +5pt", _service_target(+0.05)),
    ("Service Target -5pt", _service_target(-0.05)),
    ("Risk Weight +50%", lambda lv: lv.with_changes(risk_weight=lv.risk_weight * 1.5)),
    ("Risk Weight -50%", lambda lv: lv.with_changes(risk_weight=lv.risk_weight * 0.5)),
    ("Carbon Price +50%", lambda lv: lv.with_changes(carbon_price=lv.carbon_price * 1.5)),
    ("Carbon Price -50%", lambda lv: lv.with_changes(carbon_price=lv.carbon_price * 0.5)),
    ("Fuel Surcharge +$0.05", lambda lv: lv.with_changes(fuel_surcharge=lv.fuel_surcharge + 0.05)),
    ("Fuel Surcharge -$0.05", lambda lv: lv.with_changes(fuel_surcharge=max(0.0, lv.fuel_surcharge - 0.05))),
]


def tornado(
    network: Network,
    scenario: ScenarioState,
    perturbations=None,
    strict_lanes: bool = False,
) -> TornadoResult:
    """Evaluate every single-lever perturbation against the base scenario.

    Args:
        network: Reference data.
        scenario: Base scenario; never modified.
        perturbations: Optional (label, transform) list; defaults to PERTURBATIONS.
        strict_lanes: Passed through to evaluate().
    """
    if perturbations is None:
        perturbations = PERTURBATIONS

    base = evaluate(network, scenario, strict_lanes=strict_lanes).objective
    rows = []
    for name, transform in perturbations:
        perturbed = ScenarioState(
            allocation=dict(scenario.allocation),
            modes=dict(scenario.modes),
            levers=transform(scenario.levers),
        )
        objective = evaluate(network, perturbed, strict_lanes=strict_lanes).objective
        rows.append(SensitivityRow(name=name, objective=objective, delta=objective - base))

    rows = sorted(rows, key=lambda r: abs(r.delta), reverse=True)
    return TornadoResult(base_objective=base, rows=rows)
