"""
Dataset loading from image files.
"""

import logging
from pathlib import Path
import numpy as np
from tifffile import TiffFile
import h5py
from skimage import io

from .dataset import Dataset, axes_from_codes, default_axes
from ..utils.helpers import get_file_size_str


class ImageLoader:
    """Class to handle loading various image formats into datasets."""

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger('stack_combiner')
        self.supported_formats = {
            'tiff': ['.tif', '.tiff'],
            'hdf5': ['.h5', '.hdf5'],
            'numpy': ['.npy'],
            'image': ['.png', '.jpg', '.jpeg', '.bmp']
        }

    def _format_of(self, file_path):
        ext = Path(file_path).suffix.lower()
        for fmt, extensions in self.supported_formats.items():
            if ext in extensions:
                return fmt
        return None

    def can_open(self, file_path):
        """Check whether file_path exists and has a supported format."""
        return Path(file_path).is_file() and self._format_of(file_path) is not None

    def load_file(self, file_path):
        """Load a dataset from file, or return None if it cannot be read."""
        file_path = Path(file_path)
        if not file_path.exists():
            self.logger.error(f"File not found: {file_path}")
            return None

        fmt = self._format_of(file_path)
        if fmt is None:
            self.logger.error(f"Unsupported file format: {file_path.suffix.lower()}")
            return None

        self.logger.info(f"Loading {fmt} dataset from {file_path}")

        try:
            if fmt == 'tiff':
                data, axes = self._load_tiff(file_path)
            elif fmt == 'hdf5':
                data, axes = self._load_hdf5(file_path)
            elif fmt == 'numpy':
                data, axes = np.load(file_path, allow_pickle=False), None
            else:
                data, axes = self._load_image(file_path)

            dataset = Dataset(
                data,
                name=file_path.name,
                axes=axes,
                file_path=str(file_path),
                logger=self.logger,
            )
        except Exception as e:
            self.logger.error(f"Error loading dataset from {file_path}: {e}")
            return None

        dataset.metadata.update(self._basic_metadata(file_path, dataset))
        self.logger.info(f"Loaded dataset with shape {dataset.shape} and axes {dataset.axes}")
        return dataset

    def _load_tiff(self, file_path):
        """Read the first series of a TIFF file with its axes."""
        with TiffFile(file_path) as tif:
            series = tif.series[0]
            data = series.asarray()
            axes = axes_from_codes(series.axes)

        if len(axes) != data.ndim:
            self.logger.debug(f"TIFF axes '{series.axes}' do not match shape {data.shape}")
            axes = None
        return data, axes

    def _load_hdf5(self, file_path):
        """Read the 'data' dataset, or the first one, from an HDF5 file."""
        with h5py.File(file_path, 'r') as f:
            datasets = [key for key in f.keys() if isinstance(f[key], h5py.Dataset)]
            self.logger.debug(f"HDF5 datasets: {datasets}")

            if not datasets:
                raise ValueError("No datasets found in HDF5 file")

            dataset_name = 'data' if 'data' in datasets else datasets[0]
            node = f[dataset_name]
            data = node[()]
            axes = self._hdf5_axes(node.attrs.get('axes'), np.ndim(data))
        return data, axes

    def _hdf5_axes(self, attr, rank):
        """Interpret an HDF5 'axes' attribute as axis labels."""
        if attr is None:
            return None
        if isinstance(attr, bytes):
            attr = attr.decode()
        if isinstance(attr, str):
            axes = axes_from_codes(attr)
        else:
            axes = tuple(a.decode() if isinstance(a, bytes) else str(a) for a in attr)

        if len(axes) != rank:
            self.logger.warning(f"Ignoring HDF5 axes {axes} for data of rank {rank}")
            return None
        return axes

    def _load_image(self, file_path):
        """Read a single raster image."""
        data = io.imread(str(file_path))
        if data.ndim == 3 and data.shape[2] <= 4:
            axes = ('Y', 'X', 'Channel')
        else:
            axes = default_axes(data.ndim)
        return data, axes

    def _basic_metadata(self, file_path, dataset):
        return {
            'filename': file_path.name,
            'directory': str(file_path.parent),
            'size': get_file_size_str(str(file_path)),
            'dtype': str(dataset.dtype),
            'shape': dataset.shape,
        }

    def get_supported_formats_filter(self):
        """Return a file dialog filter string for supported formats."""
        names = {
            'tiff': "TIFF Files",
            'hdf5': "HDF5 Files",
            'numpy': "NumPy Arrays",
            'image': "Image Files",
        }
        filters = []
        for fmt, extensions in self.supported_formats.items():
            exts = " ".join(f"*{ext}" for ext in extensions)
            filters.append(f"{names[fmt]} ({exts})")

        # All supported formats
        all_exts = " ".join(f"*{ext}" for formats in self.supported_formats.values() for ext in formats)
        filters.insert(0, f"All Supported Formats ({all_exts})")

        return ";;".join(filters)
