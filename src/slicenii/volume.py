"""
Volume wrapper around nibabel Nifti images.
"""
import os

import numpy as np
import nibabel as nb


class Volume(object):
    '''Wraps a Nifti1Image and exposes the pieces needed for slicing and
    combining: the voxel array, the affine and the voxel sizes.

    A Volume is treated as immutable. Derived volumes get their own copy of
    the header, it is never shared between outputs.

    Parameters
    ----------
    nii_img : nibabel.nifti1.Nifti1Image
        The image to wrap.
    '''

    def __init__(self, nii_img):
        self.nii_img = nii_img
        self._data = None

    @property
    def header(self):
        return self.nii_img.header

    @property
    def data(self):
        '''The voxel array as float64, loaded on first access'''
        if self._data is None:
            self._data = self.nii_img.get_fdata()
        return self._data

    @property
    def shape(self):
        return tuple(self.nii_img.shape)

    @property
    def ndim(self):
        return len(self.nii_img.shape)

    @property
    def affine(self):
        return self.nii_img.affine.copy()

    @property
    def voxel_sizes(self):
        '''Voxel sizes for the three spatial axes plus the temporal one.'''
        return tuple(float(val) for val in self.header['pixdim'][1:5])

    @property
    def slice_dim(self):
        '''The slice dimension recorded in the header, or None'''
        return self.header.get_dim_info()[2]

    def derive(self, data, affine=None):
        '''Create a new Volume holding `data` with a copy of this header.

        Parameters
        ----------
        data : array
            The voxel array for the new volume.

        affine : array
            A 4x4 affine for the new volume. If None the affine of this
            volume is reused.

        Returns
        -------
        result : Volume
        '''
        hdr = self.header.copy()
        hdr.set_data_dtype(data.dtype)
        hdr.set_slope_inter(None, None)
        if affine is None:
            affine = self.affine
        else:
            affine = np.asarray(affine, dtype=np.float64)
        qform_code = int(hdr['qform_code'])
        sform_code = int(hdr['sform_code'])
        time_step = hdr['pixdim'][4]
        nii = nb.Nifti1Image(data, affine, header=hdr)

        #The constructor resets pixdim past the data dims, keep the TR
        nii.header['pixdim'][4] = time_step

        #Update whichever of the qform/sform the source had set, keeping
        #their codes
        if qform_code > 0:
            nii.set_qform(affine, code=qform_code)
        if sform_code > 0:
            nii.set_sform(affine, code=sform_code)
        elif qform_code > 0:
            nii.set_sform(affine, code=0)
        else:
            nii.set_sform(affine, code=2)
        return Volume(nii)

    def to_filename(self, out_path):
        '''Write out the wrapped Nifti to a file. The extension (.nii or
        .nii.gz) determines the format.'''
        self.nii_img.to_filename(out_path)

    @classmethod
    def from_filename(klass, path):
        '''Create a Volume from a file.

        Parameters
        ----------
        path : str
            The path to the Nifti file to load.

        Raises
        ------
        FileNotFoundError
            The path does not exist.
        '''
        if not os.path.exists(path):
            raise FileNotFoundError("No such file: %s" % path)
        return klass(nb.load(path))

    @classmethod
    def from_array(klass, data, affine=None, voxel_sizes=None):
        '''Create a Volume from an array, mostly useful for testing.'''
        if affine is None:
            affine = np.eye(4)
        nii = nb.Nifti1Image(np.asarray(data), affine)
        if voxel_sizes is not None:
            nii.header['pixdim'][1:1 + len(voxel_sizes)] = voxel_sizes
        return klass(nii)
