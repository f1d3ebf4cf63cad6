"""
Boundary schemas — lever validation and the serializable scenario record.

Lever values coming from a user (form, file, share payload) are validated
here with pydantic Field ranges before the core sees them. Out-of-range
values raise pydantic.ValidationError; nothing is clamped silently.

ScenarioRecord is the plain, JSON-serializable form of a ScenarioState
(allocation + modes + levers). Converting a state to a record and back
reproduces an identical state, including edge order. The record stores
levers as they are, so swept states outside the input ranges still export;
loading checks the ranges unless check_ranges=False.
"""

from dataclasses import asdict
from typing import Optional

from pydantic import BaseModel, Field

from planner.network import EdgeKey, TransportMode
from planner.scenario import Levers, ScenarioState


# ── Lever input ────────────────────────────────────────────────────────────────

class LeverInput(BaseModel):
    service_target:    float = Field(0.95,   ge=0.80,   le=0.99, description="OTIF target fraction")
    risk_weight:       float = Field(0.002,  ge=0.0005, le=0.01, description="Weight of risk score in the objective")
    carbon_price:      float = Field(0.02,   ge=0.0,    le=0.10, description="$ per unit CO2")
    demand_volatility: float = Field(0.10,   ge=0.0,    le=0.5,  description="Demand std-dev as a fraction of mean")
    fuel_surcharge:    float = Field(0.02,   ge=0.0,    le=0.10, description="$ per unit per edge")
    overflow_allowed:  bool  = Field(True, description="Back-fill shortages at overflow rates")

    def to_levers(self) -> Levers:
        return Levers(
            service_target=self.service_target,
            risk_weight=self.risk_weight,
            carbon_price=self.carbon_price,
            demand_volatility=self.demand_volatility,
            fuel_surcharge=self.fuel_surcharge,
            overflow_allowed=self.overflow_allowed,
        )


class ScenarioParams(LeverInput):
    """Levers plus the run parameters used by the enumerator and sampler."""
    demand_multiplier: float = Field(1.0,  gt=0.0, le=3.0,  description="Scales regional demand for assignments")
    reliability_shock: float = Field(0.02, ge=0.0, le=0.10, description="Monte Carlo uptime shock std-dev")


def validate_levers(raw: dict) -> Levers:
    """Validate a raw lever dict and return Levers. Raises ValidationError."""
    return LeverInput.model_validate(raw).to_levers()


# ── Scenario record ────────────────────────────────────────────────────────────

class AllocationEntry(BaseModel):
    plant_id: str
    dc_id: str
    quantity: float = Field(ge=0)


class ModeEntry(BaseModel):
    plant_id: str
    dc_id: str
    mode: TransportMode


class LeverRecord(BaseModel):
    """Lever values as stored in a record; ranges are checked on load."""
    service_target: float = 0.95
    risk_weight: float = 0.002
    carbon_price: float = 0.02
    demand_volatility: float = 0.10
    fuel_surcharge: float = 0.02
    overflow_allowed: bool = True


class ScenarioRecord(BaseModel):
    allocation: list[AllocationEntry] = Field(default_factory=list)
    modes: list[ModeEntry] = Field(default_factory=list)
    levers: LeverRecord = Field(default_factory=LeverRecord)
    name: Optional[str] = None


def scenario_to_record(scenario: ScenarioState, name: Optional[str] = None) -> ScenarioRecord:
    return ScenarioRecord(
        allocation=[AllocationEntry(plant_id=e.plant_id, dc_id=e.dc_id, quantity=q)
                    for e, q in scenario.allocation.items()],
        modes=[ModeEntry(plant_id=e.plant_id, dc_id=e.dc_id, mode=m)
               for e, m in scenario.modes.items()],
        levers=LeverRecord(**asdict(scenario.levers)),
        name=name,
    )


def scenario_from_record(record: ScenarioRecord, check_ranges: bool = True) -> ScenarioState:
    """Rebuild the ScenarioState. Raises ValidationError for out-of-range
    levers unless check_ranges=False."""
    raw_levers = record.levers.model_dump()
    if check_ranges:
        levers = LeverInput.model_validate(raw_levers).to_levers()
    else:
        levers = Levers(**raw_levers)
    return ScenarioState(
        allocation={EdgeKey(a.plant_id, a.dc_id): a.quantity for a in record.allocation},
        modes={EdgeKey(m.plant_id, m.dc_id): TransportMode(m.mode) for m in record.modes},
        levers=levers,
    )


def dumps_scenario(scenario: ScenarioState, name: Optional[str] = None) -> str:
    """Serialize a scenario to a JSON string."""
    return scenario_to_record(scenario, name).model_dump_json(indent=2)


def loads_scenario(text: str, check_ranges: bool = True) -> ScenarioState:
    """Parse a JSON string produced by dumps_scenario. Raises ValidationError."""
    return scenario_from_record(ScenarioRecord.model_validate_json(text), check_ranges)
