"""
Runtime settings for the planner.

Values come from environment variables prefixed with PLANNER_ (or a local
.env file), e.g. PLANNER_MC_TRIALS=500, PLANNER_STRICT_LANES=true.
Lever and run-parameter values carry the same ranges as the input
schemas, so an out-of-range value raises pydantic.ValidationError when
Settings is constructed.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from planner.scenario import Levers
from planner.schemas import ScenarioParams


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PLANNER_", env_file=".env", extra="ignore")

    # Default levers
    service_target: float = Field(0.95, ge=0.80, le=0.99)
    risk_weight: float = Field(0.002, ge=0.0005, le=0.01)
    carbon_price: float = Field(0.02, ge=0.0, le=0.10)
    demand_volatility: float = Field(0.10, ge=0.0, le=0.5)
    fuel_surcharge: float = Field(0.02, ge=0.0, le=0.10)
    overflow_allowed: bool = True

    # Run parameters
    demand_multiplier: float = Field(1.0, gt=0.0, le=3.0)
    reliability_shock: float = Field(0.02, ge=0.0, le=0.10)
    mc_trials: int = Field(200, ge=1)
    mc_seed: Optional[int] = None

    # Evaluation
    strict_lanes: bool = False       # raise MissingLaneError instead of distance 0

    # Greedy heuristic roles
    home_region: str = "US"
    secondary_region: str = "EU"
    partner_plant_id: str = "CMO_EU"

    # Paths / logging
    data_dir: Optional[str] = None   # None = repo data/ directory
    log_level: str = "INFO"

    def scenario_params(self) -> ScenarioParams:
        """Levers and run parameters as a validated ScenarioParams."""
        return ScenarioParams.model_validate(
            self.model_dump(include=set(ScenarioParams.model_fields)))

    def default_levers(self) -> Levers:
        return self.scenario_params().to_levers()


settings = Settings()
