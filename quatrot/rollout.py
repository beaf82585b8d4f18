from argparse import ArgumentParser
from typing import List, Optional
import sys

import yaml
from omegaconf.errors import OmegaConfBaseException

from quatrot.config import RolloutConfig, load_rollout_config
from quatrot.logging_utils import log_exception, setup_logging
from quatrot.stepping import Stepper, StepperFactory
from quatrot.trajectory import Trajectory


logger = setup_logging(__name__, formatter="demo")


def rollout(stepper: Stepper, max_steps: int = 100000) -> Trajectory:
    """Advance ``stepper`` until it finishes and record its orientations.

    Samples are stamped with the stepper's phase. Stops early, with a
    warning, after ``max_steps`` steps.
    """
    traj = Trajectory()
    traj.append(stepper.orientation, stepper.phase)

    num_segments = 0
    for num_steps, step in enumerate(stepper.rollout(), start=1):
        traj.append(stepper.orientation, stepper.phase)
        num_segments += int(step.segment_complete)
        if num_steps >= max_steps and not stepper.finished:
            logger.warning(f"Stopped {type(stepper).__name__} after {max_steps} steps before it finished")
            break

    logger.info(f"Recorded {len(traj)} samples over {num_segments} segments")
    return traj


def run(cfg: RolloutConfig) -> Trajectory:
    setup_logging(__name__, cfg.log_level, formatter="demo")
    logger.info(f"=====> Rollout: {cfg.name}, mode: {cfg.stepper.mode.value}, increment: {cfg.stepper.increment}")

    stepper = StepperFactory.get_stepper(cfg.stepper)
    traj = rollout(stepper, cfg.max_steps)
    if cfg.output_file:
        traj.to_file(cfg.output_file)
    return traj


def main(argv: Optional[List[str]] = None) -> int:
    parser = ArgumentParser("Quaternion demo rollout")
    parser.add_argument("--config", type=str, default=None, help="YAML rollout config")
    parser.add_argument("--output", type=str, default=None, help="Trajectory file, overrides output_file")
    parser.add_argument("overrides", nargs="*", help="key=value config overrides, e.g. stepper.mode=spline")
    parsed_args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    overrides = list(parsed_args.overrides)
    if parsed_args.output:
        overrides.append(f"output_file={parsed_args.output}")

    try:
        cfg = load_rollout_config(parsed_args.config, overrides)
    except OSError:
        log_exception(logger, f"Cannot read rollout config {parsed_args.config}")
        return 1
    except (yaml.YAMLError, OmegaConfBaseException):
        log_exception(logger, f"Malformed rollout config {parsed_args.config}")
        return 1
    except ValueError:
        # pydantic.ValidationError is a ValueError
        log_exception(logger, "Invalid rollout config")
        return 1

    run(cfg)
    return 0


if __name__ == "__main__":
    sys.exit(main())
