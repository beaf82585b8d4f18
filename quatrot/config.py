from typing import Any, Dict, List, Literal, Optional

from omegaconf import OmegaConf
from pydantic import BaseModel, Field

from quatrot.stepping import StepperConfig


class RolloutConfig(BaseModel):
    name: str = "unknown"
    stepper: StepperConfig = Field(default_factory=StepperConfig)
    max_steps: int = Field(100000, gt=0, description="Upper bound on steps, guards against a stepper that never finishes")
    output_file: Optional[str] = Field(None, description="Where to store the recorded trajectory (.csv or .npy)")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


def load_rollout_config(path: Optional[str] = None, overrides: Optional[List[str]] = None) -> RolloutConfig:
    """Build a RolloutConfig from a YAML file and ``key=value`` overrides.

    The config should look like the following:
    name: cube
    stepper:
      mode: cube_spline
      increment: 0.02
    output_file: "cube.csv"
    """
    cfg = OmegaConf.load(path) if path else OmegaConf.create()
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(overrides))

    data: Dict[str, Any] = OmegaConf.to_container(cfg, resolve=True)
    return RolloutConfig(**data)
