"""Shared test fixtures for stack_combiner."""

from __future__ import annotations

import logging
import sys

import numpy as np
import pytest

from stack_combiner.core.dataset import Dataset


@pytest.fixture(autouse=True)
def _isolate_logger(monkeypatch):
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    yield
    logger = logging.getLogger("stack_combiner")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def make_dataset():
    def _make(shape, fill=None, dtype=np.float32, name="dataset", axes=None, rng=None):
        if fill is not None:
            data = np.full(shape, fill, dtype=dtype)
        elif rng is not None:
            data = rng.integers(0, 1000, size=shape).astype(dtype)
        else:
            data = np.arange(int(np.prod(shape)), dtype=dtype).reshape(shape)
        return Dataset(data, name=name, axes=axes)

    return _make
