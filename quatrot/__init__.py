from quatrot.transformations import (
    is_unit_quaternion,
    normalize_axis,
    quaternion_angle,
    quaternion_arc_angle,
    quaternion_axis,
    quaternion_conjugate,
    quaternion_dot,
    quaternion_exp,
    quaternion_from_axis_angle,
    quaternion_identity,
    quaternion_inverse,
    quaternion_log,
    quaternion_multiply,
    quaternion_rotate,
    quaternion_slerp,
    quaternion_slerp_longest,
    quaternion_spline,
)
from quatrot.keyframes import KeyframeSequence, cube_keyframes, marker_keyframes
from quatrot.stepping import DemoMode, Step, StepperConfig, StepperFactory
from quatrot.trajectory import Trajectory
