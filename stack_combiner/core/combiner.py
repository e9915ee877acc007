"""
Element-wise combination of two datasets over their common region.

Datasets are stored outermost axis first (Time, Channel, Z, Y, X), so two
datasets are aligned on their innermost axes. The result has the smaller of
the two ranks and, in every common dimension, the smaller of the two
extents. Each output sample is the sum of the corresponding input samples,
widened to double precision and stored in a floating-point output array. An
input with more dimensions than the result is read with its extra outer
coordinates fixed at 0, so a stack plus a plane adds the first plane.
"""

import logging
from enum import Enum
import numpy as np

from .dataset import Dataset, Shape
from .parallel import parallel_map, resolve_workers
from ..utils.helpers import time_function


class CombineError(Exception):
    """Raised when two datasets cannot be combined."""


class AllocationError(CombineError, MemoryError):
    """Raised when the output array cannot be allocated."""


class Strategy(str, Enum):
    """How the output coordinates are swept."""

    LOOP = 'loop'
    SERIAL = 'serial'
    PARALLEL = 'parallel'

    @classmethod
    def from_name(cls, name):
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            choices = ', '.join(member.value for member in cls)
            raise ValueError(f"Unknown strategy: {name}. Choose from {choices}") from None


def plan_shape(a, b):
    """Shape of the region common to datasets a and b."""
    rank = min(a.rank, b.rank)
    # Innermost axes line up
    extents = tuple(min(a.extent(d), b.extent(d)) for d in range(-rank, 0))
    # Prefer the first operand's labels
    labels = a.axes[a.rank - rank:]
    return Shape(extents, labels)


def create(shape, dtype=np.float32, name='result', logger=None):
    """Allocate an uninitialised floating-point dataset of the given shape."""
    logger = logger or logging.getLogger('stack_combiner')
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.floating):
        raise TypeError(f"Output type must be floating-point, got {dtype}")

    try:
        data = np.empty(shape.extents, dtype=dtype)
    except MemoryError as e:
        logger.error(f"Could not allocate {shape.extents} array of {dtype}: {e}")
        raise AllocationError(
            f"Could not allocate result of shape {shape.extents} and type {dtype}"
        ) from e

    return Dataset(data, name=name, axes=shape.labels, logger=logger)


def _overlap(dataset, shape):
    """View of dataset restricted to shape, extra outer dimensions read at 0."""
    leading = range(dataset.rank - shape.rank)
    empty = [dim for dim in leading if dataset.extent(dim) == 0]
    if empty:
        raise CombineError(
            f"Dataset '{dataset.name}' has no samples: dimension {empty[0]} "
            f"({dataset.axis(empty[0])}) has extent 0"
        )
    index = (0,) * len(leading) + tuple(slice(0, n) for n in shape.extents)
    return dataset.data[index]


def _sum_loop(first, second, out):
    for pos in np.ndindex(*out.shape):
        out[pos] = float(first[pos]) + float(second[pos])


def _sum_block(first, second, out):
    np.add(first, second, out=out, dtype=np.float64)


def _sum_parallel(first, second, out, n_jobs):
    rows = out.shape[0]
    blocks = min(rows, resolve_workers(n_jobs))
    edges = [rows * i // blocks for i in range(blocks + 1)]
    args_list = [
        (first[lo:hi], second[lo:hi], out[lo:hi])
        for lo, hi in zip(edges[:-1], edges[1:])
    ]
    parallel_map(_sum_block, args_list, n_jobs=blocks)


class DatasetCombiner:
    """Adds two datasets over their common region."""

    def __init__(self, strategy=Strategy.SERIAL, n_jobs=-1, output_dtype='float32',
                 result_name='result', logger=None):
        self.logger = logger or logging.getLogger('stack_combiner')
        self.strategy = Strategy.from_name(strategy)
        resolve_workers(n_jobs)
        self.n_jobs = n_jobs
        self.output_dtype = np.dtype(output_dtype)
        if not np.issubdtype(self.output_dtype, np.floating):
            raise TypeError(f"Output type must be floating-point, got {self.output_dtype}")
        self.result_name = result_name

    @classmethod
    def from_config(cls, config, logger=None, **overrides):
        """Build a combiner from the 'processing' section of a config."""
        settings = dict(config.get('processing', {}))
        settings.update({k: v for k, v in overrides.items() if v is not None})
        return cls(
            strategy=settings.get('strategy', Strategy.SERIAL),
            n_jobs=settings.get('n_jobs', -1),
            output_dtype=settings.get('output_dtype', 'float32'),
            result_name=settings.get('result_name', 'result'),
            logger=logger,
        )

    @time_function
    def combine(self, a, b, name=None):
        """Return a new dataset holding a + b over their common region."""
        shape = plan_shape(a, b)
        self.logger.info(
            f"Adding '{a.name}' {a.shape} and '{b.name}' {b.shape} "
            f"-> {shape.extents} ({self.strategy.value})"
        )

        result = create(shape, self.output_dtype, name or self.result_name, self.logger)
        if shape.size == 0:
            self.logger.debug("Common region is empty, nothing to add")
            return result

        first = _overlap(a, shape)
        second = _overlap(b, shape)

        if self.strategy is Strategy.LOOP:
            _sum_loop(first, second, result.data)
        elif self.strategy is Strategy.PARALLEL:
            _sum_parallel(first, second, result.data, self.n_jobs)
        else:
            _sum_block(first, second, result.data)

        return result


def combine(a, b, strategy=Strategy.SERIAL, n_jobs=-1, output_dtype=np.float32,
            name='result', logger=None):
    """Add datasets a and b over their common region."""
    combiner = DatasetCombiner(strategy, n_jobs=n_jobs, output_dtype=output_dtype,
                               result_name=name, logger=logger)
    return combiner.combine(a, b)
