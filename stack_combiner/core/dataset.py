"""
Labelled N-dimensional datasets.
"""

import os
import logging
from dataclasses import dataclass
import numpy as np
from tifffile import imwrite

from ..utils.helpers import ensure_directory


# Row-major image order, outermost dimension first
DEFAULT_AXES = ('Time', 'Channel', 'Z', 'Y', 'X')
UNKNOWN_AXIS = 'Unknown'

# Single-character axis codes used in TIFF metadata
AXIS_CODES = {
    'T': 'Time',
    'C': 'Channel',
    'S': 'Channel',
    'Z': 'Z',
    'I': 'Z',
    'Q': 'Z',
    'Y': 'Y',
    'X': 'X',
}
LABEL_CODES = {'Time': 'T', 'Channel': 'C', 'Z': 'Z', 'Y': 'Y', 'X': 'X'}


def default_axes(rank):
    """Return default axis labels for an array of the given rank."""
    if rank <= len(DEFAULT_AXES):
        return DEFAULT_AXES[len(DEFAULT_AXES) - rank:]
    return (UNKNOWN_AXIS,) * (rank - len(DEFAULT_AXES)) + DEFAULT_AXES


def axes_from_codes(codes):
    """Translate axis codes such as 'TYX' into axis labels."""
    return tuple(AXIS_CODES.get(code.upper(), UNKNOWN_AXIS) for code in codes)


def is_real_dtype(dtype):
    """Check whether samples of dtype can be read as real numbers."""
    # bool, signed, unsigned, float
    return np.dtype(dtype).kind in 'biuf'


@dataclass(frozen=True)
class Shape:
    """Extents and axis labels of a dataset."""

    extents: tuple
    labels: tuple

    def __post_init__(self):
        extents = tuple(int(n) for n in self.extents)
        labels = tuple(str(label) for label in self.labels)
        if not extents:
            raise ValueError("Shape must have at least one dimension")
        if len(extents) != len(labels):
            raise ValueError(
                f"Got {len(extents)} extents but {len(labels)} axis labels"
            )
        if any(n < 0 for n in extents):
            raise ValueError(f"Extents must be non-negative: {extents}")
        object.__setattr__(self, 'extents', extents)
        object.__setattr__(self, 'labels', labels)

    @property
    def rank(self):
        return len(self.extents)

    @property
    def size(self):
        return int(np.prod(self.extents, dtype=np.int64))


class Dataset:
    """A named N-dimensional array of real samples with labelled axes."""

    def __init__(self, data, name='untitled', axes=None, metadata=None,
                 file_path=None, logger=None):
        self.logger = logger or logging.getLogger('stack_combiner')

        data = np.asarray(data)
        if data.ndim == 0:
            data = data.reshape(1)
            self.logger.debug(f"Promoted scalar dataset '{name}' to rank 1")

        if not is_real_dtype(data.dtype):
            raise TypeError(f"Samples of type {data.dtype} cannot be read as real numbers")

        if axes is None:
            axes = default_axes(data.ndim)
        axes = tuple(str(axis) for axis in axes)
        if len(axes) != data.ndim:
            raise ValueError(
                f"Dataset '{name}' has {data.ndim} dimensions but {len(axes)} axis labels"
            )

        self._data = data
        self.name = name
        self.axes = axes
        self.metadata = dict(metadata or {})
        self.file_path = file_path

    def __repr__(self):
        return (f"Dataset(name={self.name!r}, shape={self.shape}, "
                f"axes={self.axes}, dtype={self.dtype})")

    @property
    def data(self):
        return self._data

    @property
    def shape(self):
        return self._data.shape

    @property
    def rank(self):
        return self._data.ndim

    @property
    def size(self):
        return self._data.size

    @property
    def dtype(self):
        return self._data.dtype

    @property
    def descriptor(self):
        return Shape(self.shape, self.axes)

    def extent(self, dim):
        """Size of the dataset along dimension dim."""
        return self._data.shape[dim]

    def axis(self, dim):
        """Label of dimension dim."""
        return self.axes[dim]

    def get_real(self, pos):
        """Return the sample at a full coordinate tuple as a float."""
        if isinstance(pos, (int, np.integer)):
            pos = (pos,)
        pos = tuple(pos)
        if len(pos) != self.rank:
            raise IndexError(
                f"Expected {self.rank} coordinates for dataset '{self.name}', got {len(pos)}"
            )
        for dim, (index, extent) in enumerate(zip(pos, self.shape)):
            if not 0 <= index < extent:
                raise IndexError(
                    f"Coordinate {index} out of range [0, {extent}) in dimension {dim}"
                )
        return float(self._data[pos])

    __getitem__ = get_real

    def summary(self):
        """Basic description and intensity statistics of the dataset."""
        info = {
            'name': self.name,
            'shape': self.shape,
            'axes': self.axes,
            'dtype': str(self.dtype),
            'min': None,
            'max': None,
            'mean': None,
        }
        if self.size:
            info['min'] = float(np.min(self._data))
            info['max'] = float(np.max(self._data))
            info['mean'] = float(np.mean(self._data, dtype=np.float64))
        return info

    def save_tiff(self, file_path):
        """Save the dataset to a TIFF file, keeping the axis labels."""
        codes = [LABEL_CODES.get(axis) for axis in self.axes]
        metadata = {}
        if all(codes) and len(set(codes)) == len(codes):
            metadata['axes'] = ''.join(codes)

        try:
            ensure_directory(os.path.dirname(os.path.abspath(file_path)))
            imwrite(file_path, self._data, photometric='minisblack', metadata=metadata)
            self.logger.info(f"Saved dataset '{self.name}' to {file_path}")
            return True
        except (OSError, ValueError) as e:
            self.logger.error(f"Error saving dataset: {e}")
            return False
