"""Headless drivers for the quaternion demos.

Each demo advances an accumulator once per frame and turns it into a
position or orientation. A stepper owns that accumulator; the caller decides
when to call ``advance`` and what to do with the result.
"""

from abc import abstractmethod
from enum import Enum
from typing import Any, Iterator, NamedTuple, Optional
import logging

import numpy as np
from pydantic import BaseModel, Field

from quatrot.keyframes import (
    CUBE_VERTEX_ORIGINS,
    SPHERE_ORIGIN,
    KeyframeSequence,
    cube_keyframes,
    marker_keyframes,
)
from quatrot.transformations import (
    normalize_axis,
    quaternion_from_axis_angle,
    quaternion_identity,
    quaternion_multiply,
    quaternion_rotate,
    quaternion_slerp,
    quaternion_slerp_longest,
)


logger = logging.getLogger(__name__)


class DemoMode(Enum):
    SIMPLE = "simple"
    COMPOSITE = "composite"
    SPHERICAL = "spherical"
    SPLINE = "spline"
    CUBE_SPLINE = "cube_spline"
    CUBE_SLERP = "cube_slerp"


DEFAULT_INCREMENTS = {
    DemoMode.SIMPLE: 1.0,       # degrees per step
    DemoMode.COMPOSITE: 1.0,    # degrees per step
    DemoMode.SPHERICAL: 0.005,
    DemoMode.SPLINE: 0.04,
    DemoMode.CUBE_SPLINE: 0.02,
    DemoMode.CUBE_SLERP: 0.02,
}


class StepperConfig(BaseModel):
    mode: DemoMode = Field(DemoMode.SIMPLE, description="Which demo the stepper drives")
    increment: Optional[float] = Field(None, gt=0, description="Accumulator increment per step, defaults per mode")
    marker_count: int = Field(12, ge=2, description="Number of markers for the spline demo")
    seed: Optional[int] = Field(None, description="Seed for the spline demo's random marker jitter")

    def model_post_init(self, __context: Any) -> None:
        if self.increment is None:
            self.increment = DEFAULT_INCREMENTS[self.mode]


class Step(NamedTuple):
    value: np.ndarray
    segment_complete: bool


class Stepper():
    def __init__(self, increment: float) -> None:
        assert increment > 0, "The increment must be positive"
        self.increment = increment
        self.orientation = quaternion_identity()
        self.finished = False

    @property
    @abstractmethod
    def phase(self) -> float:
        """Progress through the whole demo; increases with every step."""
        pass

    @abstractmethod
    def reset(self) -> None:
        pass

    @abstractmethod
    def _step(self, delta: float) -> Step:
        pass

    def advance(self, delta: Optional[float] = None) -> Step:
        """Move the accumulator forward by ``delta`` (the configured increment
        by default) and return the new value.

        Raises:
            RuntimeError: if the stepper has already finished.
        """
        if self.finished:
            raise RuntimeError(f"{type(self).__name__} has finished, call reset() to run it again")
        if delta is None:
            delta = self.increment
        return self._step(delta)

    def rollout(self) -> Iterator[Step]:
        while not self.finished:
            yield self.advance()

    def __iter__(self) -> Iterator[Step]:
        return self.rollout()

    def _finish(self) -> None:
        self.finished = True
        logger.info(f"{type(self).__name__} finished at phase {self.phase:.3f}")


class SimpleRotationStepper(Stepper):
    """A point on the sphere rotating about the x axis, down to -60 degrees."""
    end_angle = -60.0

    def __init__(self, increment: float = 1.0) -> None:
        super().__init__(increment)
        self.axis = np.array([1.0, 0.0, 0.0])
        self.reset()

    @property
    def phase(self) -> float:
        return -self.angle

    def reset(self) -> None:
        self.angle = 0.0
        self.orientation = quaternion_identity()
        self.finished = False

    def _step(self, delta: float) -> Step:
        self.angle -= delta
        self.orientation = quaternion_from_axis_angle(self.axis, np.deg2rad(self.angle))
        point = quaternion_rotate(self.orientation, SPHERE_ORIGIN)

        done = self.angle < self.end_angle
        if done:
            self._finish()
        return Step(point, done)


class CompositeRotationStepper(Stepper):
    """Two rotations by the same angle about different axes and their product.

    After a full turn all three points are back at the start.
    """
    end_angle = -360.0

    def __init__(self, increment: float = 1.0) -> None:
        super().__init__(increment)
        self.axis_a = np.array([1.0, 0.0, 0.0])
        self.axis_b = normalize_axis(np.array([0.0, -0.75, -0.5]))
        self.reset()

    @property
    def phase(self) -> float:
        return -self.angle

    def reset(self) -> None:
        self.angle = 0.0
        self.orientation = quaternion_identity()
        self.component_points = np.tile(SPHERE_ORIGIN, (2, 1))
        self.finished = False

    def _step(self, delta: float) -> Step:
        self.angle -= delta
        angle = np.deg2rad(self.angle)
        quaternion_a = quaternion_from_axis_angle(self.axis_a, angle)
        quaternion_b = quaternion_from_axis_angle(self.axis_b, angle)

        self.component_points = np.array([
            quaternion_rotate(quaternion_a, SPHERE_ORIGIN),
            quaternion_rotate(quaternion_b, SPHERE_ORIGIN),
        ])
        self.orientation = quaternion_multiply(quaternion_a, quaternion_b)
        point = quaternion_rotate(self.orientation, SPHERE_ORIGIN)

        done = self.angle <= self.end_angle
        if done:
            self._finish()
        return Step(point, done)


class SphericalInterpolationStepper(Stepper):
    """Shortest arc from q0 to q1 next to the longest arc from q1 to q2.

    The value is the point on the shortest arc; the longest arc covers more
    ground per step, so it is sampled twice per step into ``longest_points``.
    """
    def __init__(self, increment: float = 0.005) -> None:
        super().__init__(increment)
        self.q0 = quaternion_from_axis_angle(np.array([0.0, -1.0, 0.0]), np.pi / 6)
        self.q1 = quaternion_from_axis_angle(normalize_axis(np.array([-1.0, 1.0, 0.0])), np.pi / 6)
        self.q2 = quaternion_from_axis_angle(normalize_axis(np.array([1.0, 0.0, -1.0])), np.pi / 20)
        self.reset()

    @property
    def phase(self) -> float:
        return self.time

    @property
    def keyframe_points(self) -> np.ndarray:
        return np.array([quaternion_rotate(q, SPHERE_ORIGIN) for q in (self.q0, self.q1, self.q2)])

    def reset(self) -> None:
        self.time = 0.0
        self.orientation = self.q0
        self.longest_points = np.tile(quaternion_rotate(self.q1, SPHERE_ORIGIN), (2, 1))
        self.finished = False

    def _step(self, delta: float) -> Step:
        self.time += delta

        self.orientation = quaternion_slerp(self.q0, self.q1, self.time)
        point = quaternion_rotate(self.orientation, SPHERE_ORIGIN)

        self.longest_points = np.array([
            quaternion_rotate(quaternion_slerp_longest(self.q1, self.q2, t), SPHERE_ORIGIN)
            for t in (self.time, self.time + 0.5 * delta)
        ])

        done = not self.time < 1.0
        if done:
            self._finish()
        return Step(point, done)


class KeyframeStepper(Stepper):
    """Walks the segments of a keyframe sequence, one accumulator per segment."""
    def __init__(self, keyframes: KeyframeSequence, increment: float, use_spline: bool = True) -> None:
        super().__init__(increment)
        self.keyframes = keyframes
        self.use_spline = use_spline
        self.reset()

    @property
    def phase(self) -> float:
        return self.index - self.keyframes.first_index + self.time

    def reset(self) -> None:
        self.index = self.keyframes.first_index
        self.time = 0.0
        self.orientation = self.keyframes[self.index]
        self.finished = False

    @abstractmethod
    def value(self, orientation: np.ndarray) -> np.ndarray:
        pass

    def _step(self, delta: float) -> Step:
        self.time += delta

        if self.use_spline:
            self.orientation = self.keyframes.spline_at(self.index, self.time)
        else:
            self.orientation = self.keyframes.slerp_at(self.index, self.time)
        value = self.value(self.orientation)

        done = not self.time < 1.0
        if done:
            logger.debug(f"Segment {self.index} complete")
            self.index += 1
            self.time = 0.0
            if self.index > self.keyframes.last_index:
                self._finish()
        return Step(value, done)


class SplineInterpolationStepper(KeyframeStepper):
    """A point following a spline through the marker keyframes."""
    def __init__(self, keyframes: KeyframeSequence, increment: float = 0.04) -> None:
        super().__init__(keyframes, increment, use_spline=True)

    @property
    def marker_points(self) -> np.ndarray:
        return quaternion_rotate(self.keyframes.interior[:-1], SPHERE_ORIGIN)

    def value(self, orientation: np.ndarray) -> np.ndarray:
        return quaternion_rotate(orientation, SPHERE_ORIGIN)


class CubeRotationStepper(KeyframeStepper):
    """The vertices of a cube rotated through the cube keyframes."""
    def __init__(self, keyframes: KeyframeSequence, increment: float = 0.02, use_spline: bool = True) -> None:
        super().__init__(keyframes, increment, use_spline=use_spline)

    def value(self, orientation: np.ndarray) -> np.ndarray:
        return quaternion_rotate(orientation, CUBE_VERTEX_ORIGINS)


class StepperFactory:
    @staticmethod
    def get_stepper(config: StepperConfig) -> Stepper:
        if config.mode == DemoMode.SIMPLE:
            return SimpleRotationStepper(config.increment)
        elif config.mode == DemoMode.COMPOSITE:
            return CompositeRotationStepper(config.increment)
        elif config.mode == DemoMode.SPHERICAL:
            return SphericalInterpolationStepper(config.increment)
        elif config.mode == DemoMode.SPLINE:
            rng = np.random.default_rng(config.seed)
            keyframes = marker_keyframes(config.marker_count, rng)
            return SplineInterpolationStepper(keyframes, config.increment)
        elif config.mode == DemoMode.CUBE_SPLINE:
            return CubeRotationStepper(cube_keyframes(), config.increment, use_spline=True)
        elif config.mode == DemoMode.CUBE_SLERP:
            return CubeRotationStepper(cube_keyframes(), config.increment, use_spline=False)
        else:
            raise ValueError(f"Unsupported demo mode: {config.mode}")
