# utils/_hdf5.py
"""Utilities for HDF5 file interaction."""

__all__ = [
    "hdf5_savehandle",
    "hdf5_loadhandle",
    "save_vectors",
    "load_vectors",
]

import os
import h5py
import warnings
import numpy as np

from .. import errors


# File handle classes =========================================================
class _hdf5_filehandle:
    """Get a handle to an open HDF5 file to read or write to.

    Parameters
    ----------
    filename : str or h5py File/Group handle
        * str : Name of the file to interact with.
        * h5py File/Group handle : handle to part of an already open HDF5 file.
    mode : str
        Type of interaction for the HDF5 file.
        * "save" : Open the file for writing only.
        * "load" : Open the file for reading only.
    overwrite : bool
        If True, overwrite the file if it already exists. If False,
        raise a FileExistsError if the file already exists.
        Only applies when ``mode = "save"``.
    """

    def __init__(self, filename, mode, overwrite=False):
        """Open the file handle."""
        if isinstance(filename, h5py.HLObject):
            # `filename` is already an open HDF5 file.
            self.file_handle = filename
            self.close_when_done = False

        elif mode == "save":
            if not filename.endswith(".h5"):
                warnings.warn(
                    "expected file with extension '.h5'",
                    errors.PROMWarning,
                )
            if os.path.isfile(filename) and not overwrite:
                raise FileExistsError(f"{filename} (overwrite=True to ignore)")
            self.file_handle = h5py.File(filename, "w")
            self.close_when_done = True

        elif mode == "load":
            if not os.path.isfile(filename):
                raise FileNotFoundError(filename)
            self.file_handle = h5py.File(filename, "r")
            self.close_when_done = True

        else:
            raise ValueError(f"invalid mode '{mode}'")

    def __enter__(self):
        """Return the handle to the open HDF5 file."""
        return self.file_handle

    def __exit__(self, exc_type, exc_value, exc_traceback):
        """Close the file if needed."""
        if self.close_when_done:
            self.file_handle.close()
        if exc_type:
            raise


class hdf5_savehandle(_hdf5_filehandle):
    """Get a handle to an open HDF5 file to write to.

    Parameters
    ----------
    savefile : str or h5py File/Group handle
        * str : Name of the file to save to.
        * h5py File/Group handle : handle to part of an already open HDF5 file
          to save data to.
    overwrite : bool
        If ``True``, overwrite the file if it already exists.
        If ``False``, raise a ``FileExistsError`` if the file already exists.

    Examples
    --------
    >>> with hdf5_savehandle("prom.h5", False) as hf:
    ...     hf.create_dataset("Kr", data=Kr)
    """

    def __init__(self, savefile, overwrite):
        return _hdf5_filehandle.__init__(self, savefile, "save", overwrite)


class hdf5_loadhandle(_hdf5_filehandle):
    """Get a handle to an open HDF5 file to read from.

    Parameters
    ----------
    loadfile : str or h5py File/Group handle
        * str : Name of the file to read from.
        * h5py File/Group handle : handle to part of an already open HDF5 file
          to read data from.

    Examples
    --------
    >>> with hdf5_loadhandle("prom.h5") as hf:
    ...    Kr = hf["Kr"][:]
    """

    def __init__(self, loadfile):
        return _hdf5_filehandle.__init__(self, loadfile, "load")

    def __exit__(self, exc_type, exc_value, exc_traceback):
        """Close the file if needed. Raise a LoadfileFormatError if needed."""
        try:
            _hdf5_filehandle.__exit__(self, exc_type, exc_value, exc_traceback)
        except errors.LoadfileFormatError:
            raise
        except Exception as ex:
            raise errors.LoadfileFormatError(ex.args[0]) from ex


# Other tools =================================================================
def save_vectors(group: h5py.Group, label: str, vectors: np.ndarray) -> None:
    """Save the columns of a (possibly empty) matrix of vectors.

    Empty matrices are stored by shape only so that :func:`load_vectors`
    can restore a basis with zero columns.

    Parameters
    ----------
    group : h5py.Group
        HDF5 group to save to.
    label : str
        Name of the dataset.
    vectors : (n, k) ndarray
        Matrix whose columns are saved.
    """
    dset = group.create_dataset(label, data=vectors)
    dset.attrs["shape"] = vectors.shape


def load_vectors(group: h5py.Group, label: str) -> np.ndarray:
    """Load a matrix of vectors saved with :func:`save_vectors`."""
    if label not in group:
        raise errors.LoadfileFormatError(f"missing dataset '{label}'")
    dset = group[label]
    shape = tuple(dset.attrs["shape"])
    if 0 in shape:
        return np.empty(shape, dtype=dset.dtype)
    return dset[:]
