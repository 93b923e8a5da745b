import logging
import math
from typing import List, Sequence, Union

import numpy as np
import numpy.typing as npt
from joblib import Parallel, delayed

from .common_types import FieldLike
from .field_options import SamplingOptions
from .fields import MagneticField

__all__: List[str] = ["sample_field", "field_map"]

logger = logging.getLogger(__name__)


def _evaluate_chunk(
    field: Union[MagneticField, FieldLike], points: npt.NDArray[np.float64]
) -> npt.NDArray[np.float64]:
    if isinstance(field, MagneticField):
        bx, by, bz = field.magnetic_field(points[:, 0], points[:, 1], points[:, 2])
        return np.column_stack([bx, by, bz])
    return np.array(
        [field.get_field_value((x, y, z, 0.0)) for x, y, z in points],
        dtype=np.float64,
    ).reshape(-1, 3)


def sample_field(
    field: Union[MagneticField, FieldLike],
    points: Union[Sequence[Sequence[float]], npt.NDArray[np.float64]],
    options: SamplingOptions = SamplingOptions(),
) -> npt.NDArray[np.float64]:
    """
    Evaluate a field at many points, split into chunks evaluated on worker threads.
    Field laws are immutable, so the result does not depend on the number of
    threads or the order in which chunks are evaluated.

    Args:
        field (Union[MagneticField, FieldLike]): field law or any object with a
                                                 `get_field_value((x, y, z, t))`
        points (npt.NDArray[np.float64]): points of shape (N, 3) [m]
        options (SamplingOptions, optional): sampling options. Defaults to
                                             SamplingOptions().

    Returns:
        npt.NDArray[np.float64]: field of shape (N, 3) [T]
    """
    _points = np.asarray(points, dtype=np.float64)
    if _points.ndim != 2 or _points.shape[1] != 3:
        raise ValueError(f"`points` must have shape (N, 3), got {_points.shape}")
    if len(_points) == 0:
        return np.zeros((0, 3))

    nr_chunks = math.ceil(len(_points) / max(options.chunk_size, 1))
    chunks = np.array_split(_points, nr_chunks)
    logger.debug("sampling %d points in %d chunks", len(_points), nr_chunks)

    if options.n_cores == 1 or nr_chunks == 1:
        results = [_evaluate_chunk(field, chunk) for chunk in chunks]
    else:
        results = Parallel(
            n_jobs=options.n_cores, prefer="threads", verbose=int(options.verbose)
        )(delayed(_evaluate_chunk)(field, chunk) for chunk in chunks)
        if results is None:
            raise ValueError("No field values.")
    return np.vstack(results)


def field_map(
    field: Union[MagneticField, FieldLike],
    x: npt.NDArray[np.float64],
    y: npt.NDArray[np.float64],
    z: npt.NDArray[np.float64],
    options: SamplingOptions = SamplingOptions(),
) -> npt.NDArray[np.float64]:
    """
    Field on the regular grid spanned by x, y and z

    Args:
        field (Union[MagneticField, FieldLike]): field to sample
        x (npt.NDArray[np.float64]): grid x coordinates [m]
        y (npt.NDArray[np.float64]): grid y coordinates [m]
        z (npt.NDArray[np.float64]): grid z coordinates [m]
        options (SamplingOptions, optional): sampling options

    Returns:
        npt.NDArray[np.float64]: field of shape (len(x), len(y), len(z), 3) [T]
    """
    X, Y, Z = np.meshgrid(x, y, z, indexing="ij")
    points = np.column_stack([X.ravel(), Y.ravel(), Z.ravel()])
    return sample_field(field, points, options).reshape(*X.shape, 3)
