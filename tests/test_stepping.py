import numpy as np
import pytest
from numpy.testing import assert_allclose
from pydantic import ValidationError

from quatrot.keyframes import CUBE_VERTEX_ORIGINS, SPHERE_ORIGIN, cube_keyframes
from quatrot.stepping import (
    CompositeRotationStepper,
    CubeRotationStepper,
    DemoMode,
    SimpleRotationStepper,
    SphericalInterpolationStepper,
    SplineInterpolationStepper,
    StepperConfig,
    StepperFactory,
)
from quatrot.transformations import quaternion_identity, quaternion_rotate


def run_to_end(stepper):
    return list(stepper.rollout())


class TestStepperConfig:

    def test_defaults(self):
        config = StepperConfig()
        assert config.mode == DemoMode.SIMPLE
        assert config.increment == 1.0

    @pytest.mark.parametrize("mode, increment", [
        ("spherical", 0.005),
        ("spline", 0.04),
        ("cube_spline", 0.02),
        ("cube_slerp", 0.02),
    ])
    def test_increment_defaults_per_mode(self, mode, increment):
        config = StepperConfig(mode=mode)
        assert config.increment == increment

    def test_explicit_increment_wins(self):
        assert StepperConfig(mode="spline", increment=0.5).increment == 0.5

    def test_rejects_non_positive_increment(self):
        with pytest.raises(ValidationError):
            StepperConfig(increment=0.0)

    def test_rejects_unknown_mode(self):
        with pytest.raises(ValidationError):
            StepperConfig(mode="wobble")

    @pytest.mark.parametrize("mode, cls", [
        (DemoMode.SIMPLE, SimpleRotationStepper),
        (DemoMode.COMPOSITE, CompositeRotationStepper),
        (DemoMode.SPHERICAL, SphericalInterpolationStepper),
        (DemoMode.SPLINE, SplineInterpolationStepper),
        (DemoMode.CUBE_SPLINE, CubeRotationStepper),
        (DemoMode.CUBE_SLERP, CubeRotationStepper),
    ])
    def test_factory(self, mode, cls):
        stepper = StepperFactory.get_stepper(StepperConfig(mode=mode, seed=1))
        assert isinstance(stepper, cls)

    def test_factory_cube_modes(self):
        assert StepperFactory.get_stepper(StepperConfig(mode="cube_spline")).use_spline
        assert not StepperFactory.get_stepper(StepperConfig(mode="cube_slerp")).use_spline


class TestSimpleRotation:

    def test_first_step(self):
        stepper = SimpleRotationStepper()
        value, done = stepper.advance()
        assert not done
        assert_allclose(value, [0.0, np.sin(np.deg2rad(1.0)), np.cos(np.deg2rad(1.0))], atol=1e-15)

    def test_runs_past_minus_sixty_degrees(self):
        stepper = SimpleRotationStepper()
        steps = run_to_end(stepper)
        assert len(steps) == 61
        assert [s.segment_complete for s in steps].count(True) == 1
        assert steps[-1].segment_complete
        assert stepper.angle == -61.0

    def test_points_stay_on_sphere(self):
        for value, _ in SimpleRotationStepper(increment=5.0):
            assert_allclose(np.linalg.norm(value), 1.0)

    def test_custom_delta(self):
        stepper = SimpleRotationStepper()
        stepper.advance(5.0)
        assert stepper.angle == -5.0
        assert stepper.phase == 5.0

    def test_advance_after_finish_raises(self):
        stepper = SimpleRotationStepper(increment=30.0)
        run_to_end(stepper)
        assert stepper.finished
        with pytest.raises(RuntimeError):
            stepper.advance()

    def test_reset(self):
        stepper = SimpleRotationStepper(increment=30.0)
        run_to_end(stepper)
        stepper.reset()
        assert not stepper.finished
        assert stepper.angle == 0.0
        assert_allclose(stepper.orientation, quaternion_identity())
        assert len(run_to_end(stepper)) == 3


class TestCompositeRotation:

    def test_full_turn_returns_to_start(self):
        stepper = CompositeRotationStepper()
        steps = run_to_end(stepper)
        assert len(steps) == 360
        assert steps[-1].segment_complete
        assert_allclose(steps[-1].value, SPHERE_ORIGIN, atol=1e-12)
        assert_allclose(stepper.component_points, np.tile(SPHERE_ORIGIN, (2, 1)), atol=1e-12)

    def test_value_is_product_of_components(self):
        stepper = CompositeRotationStepper(increment=90.0)
        value, _ = stepper.advance()
        # -90 degrees about x takes +z to +y
        assert_allclose(stepper.component_points[0], [0.0, 1.0, 0.0], atol=1e-12)
        assert_allclose(np.linalg.norm(value), 1.0)
        assert_allclose(value, quaternion_rotate(stepper.orientation, SPHERE_ORIGIN))
        assert len(run_to_end(stepper)) == 3


class TestSphericalInterpolation:

    def test_steps_and_endpoint(self):
        stepper = SphericalInterpolationStepper(increment=0.25)
        steps = run_to_end(stepper)
        assert len(steps) == 4
        assert [s.segment_complete for s in steps] == [False, False, False, True]
        assert_allclose(steps[-1].value, quaternion_rotate(stepper.q1, SPHERE_ORIGIN), atol=1e-12)

    def test_longest_arc_samples(self):
        stepper = SphericalInterpolationStepper(increment=0.25)
        stepper.advance()
        assert stepper.longest_points.shape == (2, 3)
        assert_allclose(np.linalg.norm(stepper.longest_points, axis=-1), 1.0)
        assert stepper.keyframe_points.shape == (3, 3)


class TestKeyframeSteppers:

    def test_cube_slerp_walks_every_segment(self):
        stepper = CubeRotationStepper(cube_keyframes(), increment=0.5, use_spline=False)
        steps = run_to_end(stepper)
        assert len(steps) == 16
        assert [s.segment_complete for s in steps].count(True) == 8
        assert_allclose(steps[-1].value, CUBE_VERTEX_ORIGINS, atol=1e-12)

    def test_cube_spline_keeps_the_cube_rigid(self):
        stepper = CubeRotationStepper(cube_keyframes(), increment=0.1)
        for value, _ in stepper:
            assert value.shape == (8, 3)
            assert_allclose(np.linalg.norm(value, axis=-1), np.sqrt(0.75))
            assert_allclose(np.linalg.norm(value[1] - value[0]), 1.0)
            assert_allclose(np.linalg.norm(value[4] - value[0]), 1.0)

    def test_phase_increases(self):
        stepper = CubeRotationStepper(cube_keyframes(), increment=0.5)
        phases = [stepper.phase]
        for _ in stepper:
            phases.append(stepper.phase)
        assert np.all(np.diff(phases) > 0)
        assert phases[-1] == 8.0

    def test_spline_stepper(self):
        config = StepperConfig(mode="spline", increment=0.5, seed=11)
        stepper = StepperFactory.get_stepper(config)
        assert stepper.marker_points.shape == (12, 3)

        steps = run_to_end(stepper)
        assert len(steps) == 24
        for value, _ in steps:
            assert_allclose(np.linalg.norm(value), 1.0)

    def test_spline_stepper_is_reproducible(self):
        config = StepperConfig(mode="spline", increment=0.25, seed=5)
        a = [s.value for s in StepperFactory.get_stepper(config)]
        b = [s.value for s in StepperFactory.get_stepper(config)]
        assert_allclose(np.array(a), np.array(b))
