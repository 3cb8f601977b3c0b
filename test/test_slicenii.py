"""
Tests for slicenii.slicenii
"""
import warnings

import numpy as np
import nibabel as nb
import pytest

from . import test_dir, src_dir

import slicenii
from slicenii import Axis, Plane


def make_data(shape=(4, 5, 6)):
    return np.arange(np.prod(shape), dtype=np.float64).reshape(shape)


def oblique_affine():
    '''A rotated, scaled and translated affine'''
    theta = np.pi / 7
    rot = np.array([[np.cos(theta), -np.sin(theta), 0],
                    [np.sin(theta), np.cos(theta), 0],
                    [0, 0, 1]])
    affine = np.eye(4)
    affine[:3, :3] = rot.dot(np.diag([0.9, 1.1, 3.0]))
    affine[:3, 3] = [-90.0, 126.0, -72.0]
    return affine


def test_axis_index():
    assert [axis.index() for axis in Axis.spatial()] == [0, 1, 2]
    assert Axis.T.index() == 3
    assert Axis.from_index(2) is Axis.Z
    assert Axis.from_index('1') is Axis.Y
    assert str(Axis.Y) == '1'
    with pytest.raises(ValueError):
        Axis.from_index(4)
    with pytest.raises(ValueError):
        Axis.from_index('x')


class TestGuessAxis(object):
    def test_z_planes(self):
        guess = slicenii.guess_axis((64, 64, 1), (64, 64, 30))
        assert guess.scores == (0, 0, 1)
        assert guess.determined
        assert guess.axis is Axis.Z
        assert guess.best() is Axis.Z

    def test_x_planes(self):
        guess = slicenii.guess_axis((1, 64, 64), (64, 64, 64))
        assert guess.scores == (1, 0, 0)
        assert guess.axis is Axis.X

    def test_padded_planes(self):
        guess = slicenii.guess_axis((64, 4, 64), (64, 30, 64))
        assert guess.axis is Axis.Y

    def test_voxel_sizes(self):
        guess = slicenii.guess_axis((32, 64, 64), (64, 64, 64),
                                    (1.0, 1.0, 2.5), (1.0, 1.0, 1.0))
        assert guess.scores == (1, 0, 1)
        # Ties go to the lowest index
        assert guess.axis is Axis.X

        guess = slicenii.guess_axis((64, 64, 32), (64, 64, 64),
                                    (1.0, 1.0, 2.5), (1.0, 1.0, 1.0))
        assert guess.scores == (0, 0, 2)
        assert guess.axis is Axis.Z

    def test_voxel_sizes_need_both(self):
        guess = slicenii.guess_axis((64, 64, 64), (64, 64, 64),
                                    (1.0, 1.0, 2.5))
        assert guess.scores == (0, 0, 0)

    def test_undetermined(self):
        guess = slicenii.guess_axis((64, 64, 64), (64, 64, 64))
        assert guess.scores == (0, 0, 0)
        assert not guess.determined
        assert guess.axis is None
        with pytest.raises(slicenii.UndeterminedAxisError):
            guess.best()

    def test_all_tied(self):
        guess = slicenii.guess_axis((1, 1, 1), (64, 64, 64))
        assert guess.scores == (1, 1, 1)
        assert not guess.determined

    def test_partial_tie(self):
        guess = slicenii.guess_axis((10, 20, 30), (30, 30, 30))
        assert guess.scores == (1, 1, 0)
        assert guess.axis is Axis.X

    def test_too_few_dims(self):
        with pytest.raises(slicenii.DimensionalityError):
            slicenii.guess_axis((64, 64), (64, 64, 30))

    def test_volume_axis(self):
        guess = slicenii.guess_volume_axis((64, 64, 30), (2.0, 2.0, 4.0, 1.0))
        assert guess.scores == (0, 0, 2)
        assert guess.axis is Axis.Z
        guess = slicenii.guess_volume_axis((64, 64, 64), (1.0, 1.0, 1.0))
        assert not guess.determined

    def test_check_axis(self):
        guess = slicenii.guess_axis((64, 64, 1), (64, 64, 30))
        with warnings.catch_warnings():
            warnings.simplefilter('error')
            assert slicenii.check_axis(Axis.Z, guess) is Axis.Z
        with pytest.warns(UserWarning):
            assert slicenii.check_axis(Axis.X, guess) is Axis.X


class TestSliceArray(object):
    def setup_method(self, method):
        self.data = make_data()

    def test_ordinal_coverage(self):
        for axis in Axis.spatial():
            planes = slicenii.slice_array(self.data, axis)
            assert len(planes) == self.data.shape[axis]
            assert [p.ordinal for p in planes] == \
                list(range(self.data.shape[axis]))

    def test_plane_shape(self):
        planes = slicenii.slice_array(self.data, Axis.Y)
        for plane in planes:
            assert plane.data.shape == (4, 1, 6)
            assert plane.thickness == 1
            assert plane.axis is Axis.Y
            assert np.all(plane.data[:, 0, :] ==
                          self.data[:, plane.ordinal, :])

    def test_padded(self):
        planes = slicenii.slice_array_padded(self.data, Axis.Z, 4)
        assert len(planes) == 6
        for plane in planes:
            assert plane.data.shape == (4, 5, 4)
            assert plane.thickness == 4
            for idx in range(4):
                assert np.all(plane.data[:, :, idx] ==
                              self.data[:, :, plane.ordinal])

    def test_padding_one(self):
        plain = slicenii.slice_array(self.data, Axis.X)
        padded = slicenii.slice_array_padded(self.data, Axis.X, 1)
        for a, b in zip(plain, padded):
            assert a.ordinal == b.ordinal
            assert np.all(a.data == b.data)

    def test_invalid_padding(self):
        with pytest.raises(ValueError):
            slicenii.slice_array_padded(self.data, Axis.X, 0)
        with pytest.raises(ValueError):
            slicenii.slice_array_padded(self.data, Axis.X, 1.5)

    def test_not_3d(self):
        with pytest.raises(slicenii.DimensionalityError):
            slicenii.slice_array(np.zeros((4, 5)), Axis.X)
        with pytest.raises(slicenii.DimensionalityError):
            slicenii.slice_array(np.zeros((4, 5, 6, 2)), Axis.X)

    def test_time_axis(self):
        with pytest.raises(ValueError):
            slicenii.slice_array(self.data, Axis.T)

    def test_split_time(self):
        data = make_data((3, 4, 5, 2))
        vols = slicenii.split_time(data)
        assert [v.ordinal for v in vols] == [0, 1]
        for vol in vols:
            assert vol.axis is Axis.T
            assert np.all(vol.data == data[..., vol.ordinal])
        with pytest.raises(slicenii.DimensionalityError):
            slicenii.split_time(self.data)


class TestPlaneAffine(object):
    def test_identity(self):
        aff = slicenii.plane_affine(np.eye(4), Axis.X, 3)
        expected = np.eye(4)
        expected[0, 3] = 3
        assert np.allclose(aff, expected)

    def test_linear_part_kept(self):
        affine = oblique_affine()
        for axis in Axis.spatial():
            aff = slicenii.plane_affine(affine, axis, 5)
            assert np.all(aff[:3, :3] == affine[:3, :3])
            assert np.all(aff[3] == [0, 0, 0, 1])

    def test_position_invariant(self):
        affine = oblique_affine()
        for axis in Axis.spatial():
            for ordinal in range(6):
                aff = slicenii.plane_affine(affine, axis, ordinal)
                # Every voxel of the plane lands on its source voxel
                for in_plane in ([0, 0, 0, 1], [2, 0, 0, 1], [0, 3, 1, 1]):
                    plane_vox = np.array(in_plane, dtype=float)
                    plane_vox[axis] = 0
                    vox = plane_vox.copy()
                    vox[axis] = ordinal
                    assert np.allclose(aff.dot(plane_vox), affine.dot(vox),
                                       atol=1e-6)

    def test_padded_middle_copy(self):
        affine = np.diag([2.0, 2.0, 3.0, 1.0])
        affine[:3, 3] = [-10.0, 5.0, 7.0]
        aff = slicenii.plane_affine(affine, Axis.Z, 1, padding=4)
        # The middle of the four copies sits on the source plane
        assert np.allclose(aff.dot([0, 0, 2, 1]), [-10.0, 5.0, 10.0, 1.0])
        assert np.allclose(aff.dot([0, 0, 2, 1]), affine.dot([0, 0, 1, 1]))
        assert np.allclose(aff[:3, :3], affine[:3, :3])

    def test_padded_oblique(self):
        affine = oblique_affine()
        for padding in (1, 2, 3, 4):
            mid_idx = padding // 2
            for axis in Axis.spatial():
                aff = slicenii.plane_affine(affine, axis, 3, padding)
                plane_vox = np.array([1, 1, 1, 1], dtype=float)
                plane_vox[axis] = mid_idx
                vox = plane_vox.copy()
                vox[axis] = 3
                assert np.allclose(aff.dot(plane_vox), affine.dot(vox),
                                   atol=1e-6)

    def test_singular(self):
        affine = np.eye(4)
        affine[2, 2] = 0
        with pytest.raises(slicenii.SingularTransformError):
            slicenii.plane_affine(affine, Axis.Z, 1)

    def test_plane_offset(self):
        assert slicenii.plane_offset(3, Axis.Z, (1.0, 1.0, 2.5, 1.0)) == 7.5


class TestCombinePlanes(object):
    def setup_method(self, method):
        self.data = make_data()

    def test_round_trip(self):
        for axis in Axis.spatial():
            planes = slicenii.slice_array(self.data, axis)
            result = slicenii.combine_planes(planes, axis, self.data.shape)
            assert np.array_equal(result, self.data)

    def test_padding_idempotence(self):
        for axis in Axis.spatial():
            plain = slicenii.combine_planes(
                slicenii.slice_array(self.data, axis), axis, self.data.shape)
            for padding in (2, 3, 4):
                planes = slicenii.slice_array_padded(self.data, axis, padding)
                padded = slicenii.combine_planes(planes, axis,
                                                 self.data.shape)
                assert np.array_equal(padded, plain)

    def test_order_irrelevant(self):
        planes = slicenii.slice_array(self.data, Axis.Z)
        result = slicenii.combine_planes(planes[::-1], Axis.Z,
                                         self.data.shape)
        assert np.array_equal(result, self.data)

    def test_middle_copy(self):
        block = np.zeros((4, 5, 3))
        block[:, :, 1] = 7
        planes = [Plane(block, idx, Axis.Z) for idx in range(2)]
        result = slicenii.combine_planes(planes, Axis.Z, (4, 5, 2))
        assert np.all(result == 7)

    def test_count_mismatch(self):
        data = make_data((4, 5, 30))
        planes = slicenii.slice_array(data, Axis.Z)[:29]
        with pytest.raises(slicenii.CountMismatchError) as exc_info:
            slicenii.combine_planes(planes, Axis.Z, data.shape)
        assert exc_info.value.n_planes == 29
        assert exc_info.value.extent == 30

    def test_bad_ordinals(self):
        planes = slicenii.slice_array(self.data, Axis.X)
        planes[1] = Plane(planes[1].data, 0, Axis.X)
        with pytest.raises(ValueError):
            slicenii.combine_planes(planes, Axis.X, self.data.shape)
        planes[1] = Plane(planes[1].data, 4, Axis.X)
        with pytest.raises(ValueError):
            slicenii.combine_planes(planes, Axis.X, self.data.shape)

    def test_bad_section_shape(self):
        planes = slicenii.slice_array(self.data, Axis.X)
        with pytest.raises(slicenii.DimensionalityError):
            slicenii.combine_planes(planes, Axis.X, (4, 5, 7))
        planes = [Plane(np.zeros((5, 6)), idx, Axis.X) for idx in range(4)]
        with pytest.raises(slicenii.DimensionalityError):
            slicenii.combine_planes(planes, Axis.X, self.data.shape)

    def test_combine_temporal(self):
        data = make_data((3, 4, 5, 2))
        vols = slicenii.split_time(data)
        result = slicenii.combine_temporal(vols, (3, 4, 5))
        assert np.array_equal(result, data)
        with pytest.raises(slicenii.DimensionalityError):
            slicenii.combine_temporal(vols, (3, 4, 6))
        with pytest.raises(ValueError):
            slicenii.combine_temporal([], (3, 4, 5))


class TestVolumeOperations(object):
    def setup_method(self, method):
        self.data = make_data().astype(np.float32)
        self.volume = slicenii.volume.Volume.from_array(self.data,
                                                        oblique_affine())

    def test_slice_volume(self):
        results = slicenii.slice_volume(self.volume, Axis.Y)
        assert len(results) == 5
        for plane, vol in results:
            assert vol.shape == (4, 1, 6)
            assert np.allclose(vol.affine,
                               slicenii.plane_affine(oblique_affine(), Axis.Y,
                                                     plane.ordinal))

    def test_slice_volume_padded(self):
        affine = oblique_affine()
        results = slicenii.slice_volume(self.volume, Axis.Z, padding=3)
        assert len(results) == 6
        for plane, vol in results:
            assert vol.shape == (4, 5, 3)
            # The middle copy holds the source section at its old position
            assert np.array_equal(vol.data[:, :, 1],
                                  self.data[:, :, plane.ordinal])
            assert np.allclose(vol.affine.dot([2, 3, 1, 1]),
                               affine.dot([2, 3, plane.ordinal, 1]),
                               atol=1e-6)

    def test_keep_affine(self):
        results = slicenii.slice_volume(self.volume, Axis.Y, padding=4,
                                        reposition=False)
        for plane, vol in results:
            assert vol.shape == (4, 4, 6)
            assert np.allclose(vol.affine, self.volume.affine)

    def test_singular_affine(self):
        affine = np.eye(4)
        affine[:3, 1] = 0
        hdr = nb.Nifti1Header()
        hdr.set_sform(affine, code=2)
        volume = slicenii.volume.Volume(nb.Nifti1Image(self.data, affine,
                                                       header=hdr))
        with pytest.raises(slicenii.SingularTransformError):
            slicenii.slice_volume(volume, Axis.Z)

    def test_slice_4d(self):
        volume = slicenii.volume.Volume.from_array(np.zeros((2, 3, 4, 5)))
        with pytest.raises(slicenii.DimensionalityError):
            slicenii.slice_volume(volume, Axis.X)

    def test_combine_volumes(self):
        vols = [vol for _, vol in slicenii.slice_volume(self.volume, Axis.Z)]
        result = slicenii.combine_volumes(vols, Axis.Z, self.volume)
        assert np.array_equal(result.data, self.volume.data)
        assert np.allclose(result.affine, self.volume.affine)
        with pytest.raises(slicenii.CountMismatchError):
            slicenii.combine_volumes(vols[1:], Axis.Z, self.volume)

    def test_split_and_stack(self):
        data = make_data((3, 4, 5, 2))
        volume = slicenii.volume.Volume.from_array(data,
                                                   voxel_sizes=(1, 1, 1, 2.5))
        results = slicenii.split_volume(volume)
        assert len(results) == 2
        vols = [vol for _, vol in results]
        assert vols[0].voxel_sizes[3] == 2.5
        reference = slicenii.volume.Volume.from_array(np.zeros((3, 4, 5)))
        stacked = slicenii.stack_volumes(vols, reference)
        assert stacked.shape == (3, 4, 5, 2)
        assert np.array_equal(stacked.data, data)
        assert stacked.voxel_sizes[3] == 2.5
        stacked = slicenii.stack_volumes(vols, reference, time_step=0.8)
        assert np.isclose(stacked.voxel_sizes[3], 0.8)
