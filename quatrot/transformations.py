"""Quaternion math for quatrot.

Quaternion convention in this package:
- quaternions are numpy arrays shaped (..., 4)
- order is (w, x, y, z)  (scalar first)
- rotations are right-handed and active: a positive angle about +x
  takes +z towards -y

Functions never modify their inputs. Operations that assume a unit
quaternion check it with an assert instead of renormalizing.
"""

from __future__ import annotations

import numpy as np


SLERP_DOT_THRESHOLD = 0.9995
ANTIPODAL_EPS = 1e-9
UNIT_TOLERANCE = 1e-6


def _normalize(q: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    q = np.asarray(q, dtype=float)
    n = np.linalg.norm(q, axis=-1, keepdims=True)
    return q / np.clip(n, eps, None)


def _as_quaternion(q) -> np.ndarray:
    q = np.asarray(q, dtype=float)
    assert q.shape[-1] == 4, "The last dimension of a quaternion should be 4"
    return q


def is_unit_quaternion(q: np.ndarray, tol: float = UNIT_TOLERANCE) -> bool:
    q = _as_quaternion(q)
    return bool(np.all(np.abs(np.linalg.norm(q, axis=-1) - 1.0) <= tol))


def quaternion_identity() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0, 0.0])


def normalize_axis(axis: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    """Return the unit vector along ``axis``.

    Raises:
        ValueError: if ``axis`` is (numerically) the zero vector, which
            does not define a rotation axis.
    """
    axis = np.asarray(axis, dtype=float)
    assert axis.shape == (3,), "The shape of the axis should be (3,)"
    n = np.linalg.norm(axis)
    if n < eps:
        raise ValueError(f"Invalid rotation axis {axis.tolist()}: zero vector")
    return axis / n


def quaternion_from_axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    """Rotation of ``angle`` radians about ``axis``.

    ``axis`` must already be unit length. A non-unit axis gives a non-unit
    quaternion; use ``normalize_axis`` first when unsure.
    """
    axis = np.asarray(axis, dtype=float)
    half = 0.5 * angle
    return np.concatenate([[np.cos(half)], np.sin(half) * axis])


def quaternion_conjugate(q: np.ndarray) -> np.ndarray:
    out = _as_quaternion(q).copy()
    out[..., 1:] *= -1
    return out


def quaternion_inverse(q: np.ndarray) -> np.ndarray:
    q = _as_quaternion(q)
    return quaternion_conjugate(q) / np.sum(q * q, axis=-1, keepdims=True)


def quaternion_dot(q0: np.ndarray, q1: np.ndarray) -> np.ndarray:
    return np.sum(_as_quaternion(q0) * _as_quaternion(q1), axis=-1)


def quaternion_multiply(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    """Hamilton product ``q1 * q2``: rotating by the result applies q2, then q1."""
    w1, x1, y1, z1 = np.moveaxis(_as_quaternion(q1), -1, 0)
    w2, x2, y2, z2 = np.moveaxis(_as_quaternion(q2), -1, 0)

    w = w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2
    x = w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2
    y = w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2
    z = w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2
    return np.stack([w, x, y, z], axis=-1)


def quaternion_rotate(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Rotate the vector(s) ``v`` (..., 3) by the unit quaternion ``q``.

    Equivalent to ``q * (0, v) * conj(q)`` without forming the products.
    """
    q = _as_quaternion(q)
    assert is_unit_quaternion(q), "Rotation requires a unit quaternion"
    v = np.asarray(v, dtype=float)
    w = q[..., :1]
    u = q[..., 1:]
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def quaternion_log(q: np.ndarray) -> np.ndarray:
    q = _as_quaternion(q)
    assert q.shape == (4,), "The shape of the quaternion should be (4,)"
    norm = np.linalg.norm(q)
    vec_norm = np.linalg.norm(q[1:])
    if vec_norm < 1e-12:
        return np.array([np.log(norm), 0.0, 0.0, 0.0])
    theta = np.arctan2(vec_norm, q[0])
    return np.concatenate([[np.log(norm)], q[1:] / vec_norm * theta])


def quaternion_exp(q: np.ndarray) -> np.ndarray:
    q = _as_quaternion(q)
    assert q.shape == (4,), "The shape of the quaternion should be (4,)"
    vec_norm = np.linalg.norm(q[1:])
    scale = np.exp(q[0])
    # sin(x) / x, stable at 0
    sinc = np.sinc(vec_norm / np.pi)
    return scale * np.concatenate([[np.cos(vec_norm)], sinc * q[1:]])


def quaternion_angle(q: np.ndarray) -> float:
    """Rotation angle of ``q`` in [0, 2*pi]."""
    q = _as_quaternion(q)
    assert q.shape == (4,), "The shape of the quaternion should be (4,)"
    return float(2.0 * np.arctan2(np.linalg.norm(q[1:]), q[0]))


def quaternion_axis(q: np.ndarray) -> np.ndarray:
    """Rotation axis of ``q``; +x for the identity, where any axis works."""
    q = _as_quaternion(q)
    assert q.shape == (4,), "The shape of the quaternion should be (4,)"
    vec_norm = np.linalg.norm(q[1:])
    if vec_norm < 1e-12:
        return np.array([1.0, 0.0, 0.0])
    return q[1:] / vec_norm


def quaternion_arc_angle(q0: np.ndarray, q1: np.ndarray) -> float:
    """Angle between q0 and q1 as points on the unit 3-sphere."""
    q0 = _as_quaternion(q0)
    q1 = _as_quaternion(q1)
    return float(2.0 * np.arctan2(np.linalg.norm(q0 - q1), np.linalg.norm(q0 + q1)))


def _shortest_arc(q_ref: np.ndarray, q: np.ndarray) -> np.ndarray:
    """Return q or -q, whichever lies on the same hemisphere as q_ref."""
    return -q if quaternion_dot(q_ref, q) < 0 else q


def _slerp_arc(q0: np.ndarray, q1: np.ndarray, t: float) -> np.ndarray:
    """Slerp along the great circle from q0 to q1 as given, without flipping q1."""
    dot = float(np.clip(quaternion_dot(q0, q1), -1.0, 1.0))

    if dot > SLERP_DOT_THRESHOLD:
        # nearly parallel, sin(theta) ~ 0
        return _normalize(q0 + t * (q1 - q0))

    if dot < -1.0 + ANTIPODAL_EPS:
        # q1 ~ -q0: every great circle joins them, take the one through a
        # quaternion perpendicular to q0
        w, x, y, z = q0
        perp = np.array([-x, w, -z, y])
        return np.cos(np.pi * t) * q0 + np.sin(np.pi * t) * perp

    theta = np.arccos(dot)
    sin_theta = np.sin(theta)
    s0 = np.sin((1.0 - t) * theta) / sin_theta
    s1 = np.sin(t * theta) / sin_theta
    return s0 * q0 + s1 * q1


def quaternion_slerp(q0: np.ndarray, q1: np.ndarray, t: float) -> np.ndarray:
    """Spherical linear interpolation along the shorter arc.

    ``t`` is not clamped: values outside [0, 1] extrapolate past q0 / q1.
    """
    q0 = _as_quaternion(q0)
    q1 = _as_quaternion(q1)
    assert is_unit_quaternion(q0) and is_unit_quaternion(q1), "Slerp requires unit quaternions"

    # take shortest path
    return _slerp_arc(q0, _shortest_arc(q0, q1), t)


def quaternion_slerp_longest(q0: np.ndarray, q1: np.ndarray, t: float) -> np.ndarray:
    """Spherical linear interpolation along the longer arc."""
    q0 = _as_quaternion(q0)
    q1 = _as_quaternion(q1)
    assert is_unit_quaternion(q0) and is_unit_quaternion(q1), "Slerp requires unit quaternions"

    if quaternion_dot(q0, q1) > 0:
        q1 = -q1
    return _slerp_arc(q0, q1, t)


def _spline_control_point(q_prev: np.ndarray, q: np.ndarray, q_next: np.ndarray) -> np.ndarray:
    q_inv = quaternion_conjugate(q)
    log_prev = quaternion_log(quaternion_multiply(q_inv, _shortest_arc(q, q_prev)))
    log_next = quaternion_log(quaternion_multiply(q_inv, _shortest_arc(q, q_next)))
    tangent = -0.25 * (log_prev + log_next)
    tangent[0] = 0.0
    return _normalize(quaternion_multiply(q, quaternion_exp(tangent)))


def quaternion_spline(
    q_before: np.ndarray,
    q_a: np.ndarray,
    q_b: np.ndarray,
    q_after: np.ndarray,
    t: float
) -> np.ndarray:
    """Smooth interpolation from q_a (t=0) to q_b (t=1).

    q_before and q_after are the neighbouring keyframes that shape the
    tangents at q_a and q_b. At the ends of a keyframe sequence the boundary
    keyframe is repeated as its own neighbour.

    Args:
        q_before, q_a, q_b, q_after: four consecutive unit quaternions
        t: interpolation parameter in [0, 1]
    Returns:
        np.ndarray: interpolated unit quaternion (4,)
    """
    quats = [_as_quaternion(q) for q in (q_before, q_a, q_b, q_after)]
    assert all(is_unit_quaternion(q) for q in quats), "Spline requires unit quaternions"

    # keep consecutive control points on the same hemisphere
    for i in range(1, 4):
        quats[i] = _shortest_arc(quats[i - 1], quats[i])
    q_before, q_a, q_b, q_after = quats

    s_a = _spline_control_point(q_before, q_a, q_b)
    s_b = _spline_control_point(q_a, q_b, q_after)

    outer = quaternion_slerp(q_a, q_b, t)
    inner = quaternion_slerp(s_a, s_b, t)
    return quaternion_slerp(outer, inner, 2.0 * t * (1.0 - t))

