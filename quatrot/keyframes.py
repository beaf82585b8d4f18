from typing import List, Optional, Sequence, Tuple, Union
import logging
import numpy as np

from quatrot.transformations import (
    is_unit_quaternion,
    normalize_axis,
    quaternion_from_axis_angle,
    quaternion_multiply,
    quaternion_slerp,
    quaternion_spline,
)


logger = logging.getLogger(__name__)

# Unit vector from the origin to the surface of the unit sphere along +z.
SPHERE_ORIGIN = np.array([0.0, 0.0, 1.0])

# Corners of a unit cube centred at the origin.
CUBE_VERTEX_ORIGINS = np.array([
    [-0.5, -0.5, 0.5],
    [0.5, -0.5, 0.5],
    [-0.5, -0.5, -0.5],
    [0.5, -0.5, -0.5],
    [-0.5, 0.5, 0.5],
    [0.5, 0.5, 0.5],
    [-0.5, 0.5, -0.5],
    [0.5, 0.5, -0.5],
])

# The corner starting at (0.5, 0.5, 0.5)
TRACKED_VERTEX = 5


class KeyframeSequence():
    """Ordered, read-only unit quaternions used as spline control points.

    The first and last keyframes are always stored twice so that every
    segment has a keyframe before and after it. Segment i runs from
    keyframe i to keyframe i + 1 and is valid for i in [1, len - 3].
    """
    def __init__(
        self,
        rotations: Union[np.ndarray, List[List[float]]],
        padded: bool = False
    ) -> None:
        rotations = np.array(rotations, dtype=float)
        assert rotations.ndim == 2 and rotations.shape[1] == 4, "The shape of the rotations should be (N, 4)"
        assert is_unit_quaternion(rotations), "Keyframes must be unit quaternions"

        if padded:
            if len(rotations) < 4:
                raise ValueError(f"A padded keyframe sequence needs at least 4 rotations, got {len(rotations)}")
            if not (np.allclose(rotations[0], rotations[1]) and np.allclose(rotations[-1], rotations[-2])):
                raise ValueError("Padded keyframe sequence must repeat its first and last rotation")
        else:
            if len(rotations) < 2:
                raise ValueError(f"At least two keyframes are required, got {len(rotations)}")
            rotations = np.vstack([rotations[:1], rotations, rotations[-1:]])

        rotations.flags.writeable = False
        self.rotations = rotations

    @classmethod
    def from_axis_angles(
        cls,
        axes: Sequence[Sequence[float]],
        angles: Sequence[float],
        padded: bool = False
    ) -> "KeyframeSequence":
        assert len(axes) == len(angles), "Axes and angles must have the same length"
        rotations = [
            quaternion_from_axis_angle(normalize_axis(axis), angle)
            for axis, angle in zip(axes, angles)
        ]
        return cls(rotations, padded=padded)

    def __len__(self) -> int:
        return len(self.rotations)

    def __getitem__(self, idx):
        return self.rotations[idx]

    @property
    def first_index(self) -> int:
        return 1

    @property
    def last_index(self) -> int:
        return len(self) - 3

    @property
    def num_segments(self) -> int:
        return self.last_index - self.first_index + 1

    @property
    def interior(self) -> np.ndarray:
        """The keyframes without the boundary padding."""
        return self.rotations[1:-1]

    def neighborhood(self, idx: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        if not self.first_index <= idx <= self.last_index:
            raise IndexError(
                f"Segment index {idx} out of range [{self.first_index}, {self.last_index}]"
            )
        return (
            self.rotations[idx - 1],
            self.rotations[idx],
            self.rotations[idx + 1],
            self.rotations[idx + 2],
        )

    def spline_at(self, idx: int, t: float) -> np.ndarray:
        return quaternion_spline(*self.neighborhood(idx), t)

    def slerp_at(self, idx: int, t: float) -> np.ndarray:
        _, q_a, q_b, _ = self.neighborhood(idx)
        return quaternion_slerp(q_a, q_b, t)


def cube_keyframes() -> KeyframeSequence:
    """Orientations the cube passes through: a small wobble that returns to rest."""
    axes = [
        [0, 0, 1],
        [0, 1, 0],
        [1, 0, -1],
        [0, 1, 0],
        [-1, 0, 1],
        [0, -1, 0],
        [1, 0, -1],
        [0, 1, 0],
        [0, 0, 1],
    ]
    angles = np.pi * np.array([0.0, 0.05, 0.1, 0.15, 0.2, 0.15, 0.1, 0.05, 0.0])
    return KeyframeSequence.from_axis_angles(axes, angles)


def marker_keyframes(
    marker_count: int = 12,
    rng: Optional[np.random.Generator] = None
) -> KeyframeSequence:
    """Rotations sweeping around the sphere in latitude, jittered in longitude.

    Produces ``marker_count + 1`` keyframes; the longitude jitter alternates
    direction from one keyframe to the next.
    """
    assert marker_count >= 1, "At least one marker is required"
    if rng is None:
        rng = np.random.default_rng()

    y_axis = np.array([0.0, 1.0, 0.0])
    x_axis = np.array([1.0, 0.0, 0.0])

    rotations = []
    for i in range(marker_count + 1):
        angle = 2.0 * np.pi / marker_count * i
        latitude = quaternion_from_axis_angle(y_axis, (angle - np.pi / 2) * 0.3)
        direction = -1.0 if i % 2 == 0 else 1.0
        jitter = rng.uniform(0.0, 0.25)
        longitude = quaternion_from_axis_angle(x_axis, np.pi / 4 * jitter * direction)
        rotations.append(quaternion_multiply(latitude, longitude))

    logger.debug(f"Generated {len(rotations)} marker keyframes")
    return KeyframeSequence(rotations)
