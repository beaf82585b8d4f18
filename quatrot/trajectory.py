from typing import List, Optional, Union
import numpy as np
import pandas as pd

from quatrot.logging_utils import setup_logging
from quatrot.transformations import (
    quaternion_arc_angle,
    quaternion_dot,
    quaternion_rotate,
    quaternion_slerp,
)


COLUMNS = ["t", "w", "x", "y", "z"]


class Trajectory():
    """Timestamped unit quaternions (w, x, y, z), one row per sample."""
    def __init__(
        self,
        data: Union[np.ndarray, List[List[float]]] = (),
        timestamps: Optional[Union[np.ndarray, List[float]]] = None,
    ):
        data = np.array(data, dtype=float).reshape(-1, 4)
        self.data = data

        if timestamps is None:
            timestamps = np.arange(len(data), dtype=float)

        assert len(data) == len(timestamps), "Data and timestamps must have the same length"
        self.timestamps = np.array(timestamps, dtype=float)
        self.logger = setup_logging("Trajectory")

    @classmethod
    def from_file(cls, file_path: str, contain_timestamps: bool = True):
        if file_path.endswith(".csv") or file_path.endswith(".txt"):
            first_row = pd.read_csv(file_path, nrows=0)
            if list(first_row.columns) == COLUMNS:
                data = pd.read_csv(file_path).to_numpy()
            else:
                data = pd.read_csv(file_path, header=None).to_numpy()
        elif file_path.endswith(".npy"):
            data = np.load(file_path)
        else:
            raise ValueError(f"Invalid file format: {file_path}")

        if contain_timestamps:
            return cls(data[:, 1:], data[:, 0])
        return cls(data)

    def to_file(self, file_path: str, store_timestamps: bool = True):
        if store_timestamps:
            data = np.column_stack((self.timestamps, self.data))
            columns = COLUMNS
        else:
            data = self.data
            columns = COLUMNS[1:]

        if file_path.endswith(".csv"):
            pd.DataFrame(data, columns=columns).to_csv(file_path, index=False)
        elif file_path.endswith(".npy"):
            np.save(file_path, data)
        else:
            raise ValueError(f"Invalid file format: {file_path}")
        self.logger.info(f"Stored {len(self)} samples in {file_path}")

    def __len__(self):
        return len(self.data)

    def __getitem__(self, key):
        return self.data[key]

    @property
    def q0(self) -> np.ndarray:
        return self.data[0]

    @property
    def qT(self) -> np.ndarray:
        return self.data[-1]

    def append(self, quaternion: Union[List[float], np.ndarray], timestamp: Optional[float] = None):
        quaternion = np.asarray(quaternion, dtype=float)
        assert quaternion.shape == (4,), "The shape of the quaternion should be (4,)"

        if timestamp is None:
            timestamp = self.timestamps[-1] + 1.0 if len(self) else 0.0
        elif len(self) and timestamp < self.timestamps[-1]:
            raise ValueError(f"Timestamp {timestamp} is earlier than the last sample {self.timestamps[-1]}")

        self.data = np.append(self.data, [quaternion], axis=0)
        self.timestamps = np.append(self.timestamps, timestamp)

    def at(self, timestep: float) -> np.ndarray:
        """Orientation at ``timestep``, slerped between the two closest samples.

        Times before the first / after the last sample give the end samples.
        """
        assert len(self) > 0, "Cannot evaluate an empty trajectory"

        idx = np.searchsorted(self.timestamps, timestep)
        if idx == 0:
            return self.data[0].copy()
        elif idx == len(self.timestamps):
            return self.data[-1].copy()

        t0, t1 = self.timestamps[idx - 1], self.timestamps[idx]
        alpha = (timestep - t0) / (t1 - t0) if t1 != t0 else 0.0
        return quaternion_slerp(self.data[idx - 1], self.data[idx], alpha)

    def act(self, vector: Union[List[float], np.ndarray]) -> np.ndarray:
        """Rotate ``vector`` by every sample, (n, 3)."""
        vector = np.asarray(vector, dtype=float)
        return quaternion_rotate(self.data, vector)

    def arc_length(self) -> float:
        """Total angle travelled on the unit 3-sphere between consecutive samples.

        q and -q are the same rotation, so each sample is measured on the
        previous sample's hemisphere.
        """
        return float(sum(
            quaternion_arc_angle(q0, q1 if quaternion_dot(q0, q1) >= 0.0 else -q1)
            for q0, q1 in zip(self.data[:-1], self.data[1:])
        ))

    def normalize_timestamps(self, num_samples: int = 100):
        self.logger.info(
            "Normalizing timestamps. "
            "Samples are resampled uniformly onto [0, 1]."
        )
        self.timestamps = (self.timestamps - self.timestamps[0]) / (self.timestamps[-1] - self.timestamps[0])
        num_samples = max(num_samples, 2)
        timestamps = np.linspace(0, 1, num_samples, endpoint=True)
        self.data = np.array([self.at(t) for t in timestamps])
        self.timestamps = timestamps
