"""
Various utils and helpers for finding and naming Nifti files
"""
import os
import re
from glob import glob


nii_exts = ('.nii.gz', '.nii')
'''Recognized Nifti file extensions, longest first'''


def split_nii_ext(path):
    '''Split a Nifti extension off of `path`. Only '.nii' and '.nii.gz' are
    removed, so any other periods in the file name are kept.

    Returns
    -------
    A tuple (root, ext) where ext is '' if no Nifti extension was found.
    '''
    for ext in nii_exts:
        if path.lower().endswith(ext):
            return path[:-len(ext)], path[-len(ext):]
    return path, ''


def nii_basename(path):
    '''The file name of `path` without directories or Nifti extension'''
    return split_nii_ext(os.path.basename(path))[0]


def digits_key(path):
    '''Sort key using the digits in the file name, concatenated in the order
    they appear. File names without digits get a key of zero.'''
    digits = ''.join(re.findall(r'\d', os.path.basename(path)))
    if not digits:
        return 0
    return int(digits)


def name_key(path):
    '''Sort key using the file name'''
    return os.path.basename(path)


sort_keys = {'name' : name_key,
             'numeric' : digits_key,
            }
'''Available sort keys for `find_niftis`'''


def find_niftis(src_dir, start_string='', sort_by='name', exclude=None):
    '''Find the Nifti files in a directory whose name starts with
    `start_string`.

    Parameters
    ----------
    src_dir : str
        The directory to search.

    start_string : str
        Only files starting with this string are selected. May contain glob
        patterns.

    sort_by : str
        Either 'name' to sort by file name or 'numeric' to sort by the digits
        in the file name.

    exclude : sequence
        Paths to leave out of the result, even if they match.

    Returns
    -------
    A sorted list of paths.

    Raises
    ------
    FileNotFoundError
        `src_dir` does not exist.

    NotADirectoryError
        `src_dir` is not a directory.
    '''
    if not os.path.exists(src_dir):
        raise FileNotFoundError("Did not find input directory: %s" % src_dir)
    if not os.path.isdir(src_dir):
        raise NotADirectoryError("Input is not a directory: %s" % src_dir)
    try:
        key = sort_keys[sort_by]
    except KeyError:
        raise ValueError("Unknown sort key %r, must be one of %s" %
                         (sort_by, ', '.join(sorted(sort_keys))))
    excluded = set()
    if exclude:
        excluded = set(os.path.abspath(path) for path in exclude)

    glob_str = os.path.join(src_dir, start_string + '*')
    paths = []
    for path in glob(glob_str):
        if split_nii_ext(path)[1] == '' or not os.path.isfile(path):
            continue
        if os.path.abspath(path) in excluded:
            continue
        paths.append(path)
    # Ties on the key fall back to the name so the order is stable
    paths.sort(key=lambda path: (key(path), name_key(path)))
    return paths


def slice_file_name(basename, axis, ordinal, padded=False, ext='.nii'):
    '''Build the file name for a plane cut from the volume `basename`.

    The ordinal is written one based and zero padded to three digits. Planes
    cut along time are named as volumes.
    '''
    if int(axis) == 3:
        return '%s_axis-%d_vol-%03d%s' % (basename, int(axis), ordinal + 1,
                                          ext)
    marker = 'padded-' if padded else ''
    return '%s_axis-%d_slice-%s%03d%s' % (basename, int(axis), marker,
                                          ordinal + 1, ext)


def slices_dir_name(basename):
    '''Name of the directory holding the planes cut from `basename`'''
    return '%s_slices' % basename
