"""
Slice volumes into single plane stacks and combine them back together. The
contents of this module are imported into the package namespace.
"""
import warnings
from enum import IntEnum

import numpy as np

from .volume import Volume


class SliceniiError(Exception):
    '''Base class for the errors raised while slicing or combining'''
    def __init__(self, msg):
        self.msg = msg

    def __str__(self):
        return self.msg


class DimensionalityError(SliceniiError):
    '''An array does not have the number of dimensions an operation needs'''


class CountMismatchError(SliceniiError):
    '''The number of planes does not match the reference extent'''
    def __init__(self, n_planes, extent, axis):
        self.n_planes = n_planes
        self.extent = extent
        self.axis = axis
        self.msg = ("Number of planes (%d) does not match the reference "
                    "size along axis %d (%d)" % (n_planes, axis, extent))


class UndeterminedAxisError(SliceniiError):
    '''The axis guessing heuristic could not pick a single axis'''
    def __init__(self, scores):
        self.scores = scores
        self.msg = ("Unable to guess the slice axis, the scores %s do not "
                    "single out one axis. Pass the axis explicitly." %
                    (scores,))


class SingularTransformError(SliceniiError):
    '''The affine can not be inverted'''
    def __init__(self, affine):
        self.affine = affine
        self.msg = ("The affine is singular, the position of the planes in "
                    "world space can not be recovered:\n%s" % affine)


class Axis(IntEnum):
    '''The three spatial axes of a volume, plus the time axis of a 4D
    series. The value is the index of the matching array dimension.'''
    X = 0
    Y = 1
    Z = 2
    T = 3

    def index(self):
        return int(self)

    @classmethod
    def from_index(klass, idx):
        try:
            return klass(int(idx))
        except ValueError:
            raise ValueError("The axis must be 0, 1, 2 or 3 for the first, "
                             "second, third or time axis, not %r" % (idx,))

    @classmethod
    def spatial(klass):
        return (klass.X, klass.Y, klass.Z)

    def __str__(self):
        return str(self.value)


def _check_spatial(axis):
    axis = Axis.from_index(axis)
    if axis == Axis.T:
        raise ValueError("The time axis can not be used for spatial slicing "
                         "or combining")
    return axis


class Plane(object):
    '''A block of data cut out of a volume along `axis`, along with its
    position along that axis.

    Parameters
    ----------
    data : array
        The 3D data block. Its extent along `axis` is one, or the padding
        factor for padded planes. For the time axis this is a full volume.

    ordinal : int
        Zero based position along `axis` in the source volume.

    axis : Axis
        The axis the plane was cut along.
    '''

    def __init__(self, data, ordinal, axis):
        self.data = data
        self.ordinal = ordinal
        self.axis = Axis.from_index(axis)

    @property
    def thickness(self):
        if self.axis == Axis.T:
            return 1
        return self.data.shape[self.axis]

    def __repr__(self):
        return 'Plane(ordinal=%d, axis=%s, shape=%s)' % (self.ordinal,
                                                         self.axis,
                                                         self.data.shape)


class AxisGuess(object):
    '''Result of guessing a slice axis. Keeps the raw per axis scores so
    ambiguous cases can be inspected.

    Parameters
    ----------
    scores : sequence
        The score for the X, Y and Z axes.
    '''

    def __init__(self, scores):
        self.scores = tuple(int(score) for score in scores)

    @property
    def determined(self):
        '''False when all three axes scored the same'''
        return len(set(self.scores)) > 1

    @property
    def axis(self):
        '''The highest scoring axis, ties going to the lowest index. None if
        the guess is not determined.'''
        if not self.determined:
            return None
        return Axis(self.scores.index(max(self.scores)))

    def best(self):
        '''Return the guessed axis or raise UndeterminedAxisError'''
        if not self.determined:
            raise UndeterminedAxisError(self.scores)
        return self.axis

    def __repr__(self):
        return 'AxisGuess(scores=%s, axis=%s)' % (self.scores, self.axis)


def guess_axis(shape, reference_shape, voxel_sizes=None,
               reference_voxel_sizes=None):
    '''Guess which axis a set of planes was sliced along by comparing it to a
    reference volume.

    An axis scores a point when the candidate is smaller than the reference
    along it, and another when the candidate voxel size along it is larger.

    Parameters
    ----------
    shape : sequence
        Shape of the candidate planes.

    reference_shape : sequence
        Shape of the reference volume.

    voxel_sizes : sequence
        Optional voxel sizes of the candidate planes.

    reference_voxel_sizes : sequence
        Optional voxel sizes of the reference volume. Voxel sizes only count
        when both are given.

    Returns
    -------
    result : AxisGuess
    '''
    if len(shape) < 3 or len(reference_shape) < 3:
        raise DimensionalityError("Guessing the axis requires at least three "
                                  "dimensions")
    use_sizes = voxel_sizes is not None and reference_voxel_sizes is not None
    scores = []
    for axis in Axis.spatial():
        score = 0
        if shape[axis] < reference_shape[axis]:
            score += 1
        if use_sizes and voxel_sizes[axis] > reference_voxel_sizes[axis]:
            score += 1
        scores.append(score)
    return AxisGuess(scores)


def guess_volume_axis(shape, voxel_sizes=None):
    '''Guess the acquisition slice axis of a single volume, which tends to
    have the fewest samples and the thickest voxels.

    The volume is scored against its own largest extent and smallest voxel
    size with `guess_axis`.
    '''
    ref_shape = (max(shape[:3]),) * 3
    ref_sizes = None
    if voxel_sizes is not None:
        ref_sizes = (min(voxel_sizes[:3]),) * 3
    return guess_axis(shape[:3], ref_shape, voxel_sizes, ref_sizes)


def check_axis(axis, guess):
    '''Warn if an explicitly given `axis` disagrees with a determined
    `guess`. Returns `axis` unchanged.'''
    if guess.determined and guess.axis != axis:
        warnings.warn("The given axis %s does not match the guessed axis %s "
                      "(scores %s)" % (axis, guess.axis, guess.scores))
    return axis


def _cross_section(data, axis, idx):
    section = np.take(data, idx, axis=axis)
    if section.ndim != 2:
        raise DimensionalityError("Expected a 2D cross section along axis "
                                  "%d, got shape %s" % (axis, section.shape))
    return section


def slice_array_padded(data, axis, padding):
    '''Split a 3D array into planes along `axis`, repeating each cross section
    `padding` times along that axis.

    Parameters
    ----------
    data : array
        The 3D voxel array.

    axis : Axis
        The spatial axis to slice along.

    padding : int
        Number of copies of each cross section in the resulting plane.

    Returns
    -------
    planes : list
        One Plane per index along `axis`, in ascending order.
    '''
    axis = _check_spatial(axis)
    if int(padding) != padding or padding < 1:
        raise ValueError("The padding must be an integer >= 1, not %r" %
                         (padding,))
    padding = int(padding)
    data = np.asanyarray(data)
    if data.ndim != 3:
        raise DimensionalityError("Slicing requires a 3D array, got %dD" %
                                  data.ndim)
    planes = []
    for idx in range(data.shape[axis]):
        section = np.expand_dims(_cross_section(data, axis, idx), axis)
        if padding > 1:
            section = np.concatenate([section] * padding, axis=axis)
        planes.append(Plane(section, idx, axis))
    return planes


def slice_array(data, axis):
    '''Split a 3D array into thickness one planes along `axis`'''
    return slice_array_padded(data, axis, 1)


def split_time(data):
    '''Split a 4D array into its 3D volumes along the last axis'''
    data = np.asanyarray(data)
    if data.ndim != 4:
        raise DimensionalityError("Splitting along time requires a 4D array, "
                                  "got %dD" % data.ndim)
    return [Plane(data[..., idx], idx, Axis.T)
            for idx in range(data.shape[3])]


def check_affine(affine):
    '''Return the inverse of `affine`, raising SingularTransformError if
    there is none.'''
    affine = np.asarray(affine, dtype=np.float64)
    if affine.shape != (4, 4):
        raise ValueError("The affine must be 4x4")
    if np.linalg.det(affine) == 0.0:
        raise SingularTransformError(affine)
    try:
        inv = np.linalg.inv(affine)
    except np.linalg.LinAlgError:
        raise SingularTransformError(affine)
    if not np.all(np.isfinite(inv)):
        raise SingularTransformError(affine)
    return inv


def plane_offset(ordinal, axis, voxel_sizes):
    '''The physical distance of plane `ordinal` from the first plane'''
    return ordinal * voxel_sizes[_check_spatial(axis)]


def plane_affine(affine, axis, ordinal, padding=1):
    '''Compute the affine for a single plane file cut from a volume.

    The linear part is kept, only the translation changes so that the middle
    copy of the plane (index `padding // 2` along `axis`) lands where index
    `ordinal` along `axis` was in the source volume.

    Parameters
    ----------
    affine : array
        The 4x4 affine of the source volume.

    axis : Axis
        The axis the plane was cut along.

    ordinal : int
        The index of the plane along `axis`.

    padding : int
        Number of copies of the cross section in the plane.

    Returns
    -------
    result : array
        The 4x4 affine for the plane.

    Raises
    ------
    SingularTransformError
        The source affine is not invertible.
    '''
    axis = _check_spatial(axis)
    check_affine(affine)
    affine = np.asarray(affine, dtype=np.float64)
    src_vox = np.zeros(4)
    src_vox[axis] = ordinal - padding // 2
    src_vox[3] = 1.0
    world = affine.dot(src_vox)

    result = affine.copy()
    result[:3, 3] = world[:3]
    return result


def slice_volume(volume, axis, padding=1, reposition=True):
    '''Slice a Volume into single plane Volumes.

    Parameters
    ----------
    volume : Volume
        The 3D source volume.

    axis : Axis
        The spatial axis to slice along.

    padding : int
        Number of copies of each cross section per plane.

    reposition : bool
        If True each plane gets an affine placing it where it was in the
        source volume. Otherwise the source affine is reused as is.

    Returns
    -------
    result : list
        A (Plane, Volume) tuple for each index along `axis`.

    Raises
    ------
    SingularTransformError
        The source affine is not invertible and `reposition` is True. This is
        checked before any plane is produced.
    '''
    axis = _check_spatial(axis)
    if volume.ndim != 3:
        raise DimensionalityError("Input volume must be 3D, got shape %s. "
                                  "Split 4D series along time first." %
                                  (volume.shape,))
    affine = volume.affine
    if reposition:
        check_affine(affine)
    result = []
    for plane in slice_array_padded(volume.data, axis, padding):
        plane_aff = None
        if reposition:
            plane_aff = plane_affine(affine, axis, plane.ordinal, padding)
        result.append((plane, volume.derive(plane.data, plane_aff)))
    return result


def split_volume(volume):
    '''Split a 4D Volume into its 3D volumes, keeping the affine and header
    (including the temporal voxel size) of the source.'''
    if volume.ndim != 4:
        raise DimensionalityError("Input volume must be 4D to split along "
                                  "time, got shape %s" % (volume.shape,))
    return [(plane, volume.derive(plane.data))
            for plane in split_time(volume.data)]


def _check_ordinals(planes, extent):
    seen = set()
    for plane in planes:
        if not 0 <= plane.ordinal < extent:
            raise ValueError("Plane ordinal %d is out of range [0, %d)" %
                             (plane.ordinal, extent))
        if plane.ordinal in seen:
            raise ValueError("Duplicate plane ordinal %d" % plane.ordinal)
        seen.add(plane.ordinal)


def combine_planes(planes, axis, reference_shape):
    '''Merge planes back into a single 3D array.

    The middle cross section of each plane (along `axis`) is written at the
    plane's ordinal. Indices without a plane stay zero.

    Parameters
    ----------
    planes : sequence
        The Plane objects to merge.

    axis : Axis
        The spatial axis the planes were cut along.

    reference_shape : sequence
        The shape of the result.

    Returns
    -------
    result : array

    Raises
    ------
    CountMismatchError
        The number of planes is not the extent of the reference along `axis`.
    '''
    axis = _check_spatial(axis)
    reference_shape = tuple(reference_shape)
    if len(reference_shape) != 3:
        raise DimensionalityError("Reference must be 3D, got shape %s" %
                                  (reference_shape,))
    extent = reference_shape[axis]
    if len(planes) != extent:
        raise CountMismatchError(len(planes), extent, axis)
    _check_ordinals(planes, extent)

    section_shape = (reference_shape[:axis] + reference_shape[axis + 1:])
    result = np.zeros(reference_shape)
    index = [slice(None)] * 3
    for plane in planes:
        if plane.data.ndim != 3:
            raise DimensionalityError("Plane %d is not 3D, got shape %s" %
                                      (plane.ordinal, plane.data.shape))
        mid_idx = plane.data.shape[axis] // 2
        section = np.take(plane.data, mid_idx, axis=axis)
        if section.shape != section_shape:
            raise DimensionalityError("Plane %d has a cross section of shape "
                                      "%s, expected %s" %
                                      (plane.ordinal, section.shape,
                                       section_shape))
        index[axis] = plane.ordinal
        result[tuple(index)] = section
    return result


def combine_temporal(planes, reference_shape):
    '''Stack 3D planes along a new time axis, ordered by ordinal.'''
    reference_shape = tuple(reference_shape)
    if len(reference_shape) != 3:
        raise DimensionalityError("Reference must be 3D, got shape %s" %
                                  (reference_shape,))
    if len(planes) == 0:
        raise ValueError("No volumes to stack")
    _check_ordinals(planes, len(planes))
    result = np.zeros(reference_shape + (len(planes),))
    for plane in planes:
        if plane.data.shape != reference_shape:
            raise DimensionalityError("Volume %d has shape %s, expected %s" %
                                      (plane.ordinal, plane.data.shape,
                                       reference_shape))
        result[..., plane.ordinal] = plane.data
    return result


def combine_volumes(volumes, axis, reference):
    '''Combine a sequence of single plane Volumes, ordered by position in the
    sequence, into a Volume with the geometry of `reference`.'''
    axis = _check_spatial(axis)
    if reference.ndim != 3:
        raise DimensionalityError("Reference volume must be 3D, got shape "
                                  "%s" % (reference.shape,))
    if len(volumes) != reference.shape[axis]:
        raise CountMismatchError(len(volumes), reference.shape[axis], axis)
    planes = [Plane(vol.data, idx, axis) for idx, vol in enumerate(volumes)]
    return reference.derive(combine_planes(planes, axis, reference.shape))


def stack_volumes(volumes, reference, time_step=None):
    '''Stack a sequence of 3D Volumes along time into a 4D Volume with the
    geometry of `reference`.

    Parameters
    ----------
    volumes : sequence
        The 3D volumes, in time order.

    reference : Volume
        The 3D volume providing the spatial geometry.

    time_step : float
        The temporal voxel size of the result. If None, the temporal voxel
        size of the first input volume is used.
    '''
    if reference.ndim != 3:
        raise DimensionalityError("Reference volume must be 3D, got shape "
                                  "%s" % (reference.shape,))
    planes = [Plane(vol.data, idx, Axis.T) for idx, vol in enumerate(volumes)]
    data = combine_temporal(planes, reference.shape)
    if time_step is None:
        time_step = volumes[0].voxel_sizes[3]
    result = reference.derive(data)
    result.header.set_zooms(result.header.get_zooms()[:3] + (time_step,))
    return result
