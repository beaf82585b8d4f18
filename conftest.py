import numpy as np
import pytest


@pytest.fixture
def rng():
    """Deterministic generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def random_quaternions(rng):
    """Ten random unit quaternions (w, x, y, z)."""
    q = rng.normal(size=(10, 4))
    return q / np.linalg.norm(q, axis=-1, keepdims=True)


@pytest.fixture
def random_vectors(rng):
    return rng.uniform(-2.0, 2.0, size=(10, 3))
