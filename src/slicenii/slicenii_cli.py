"""
Command line interface for slicing a Nifti volume into single plane files.
"""
import os, sys, argparse, warnings

from nibabel.filebasedimages import ImageFileError

from .slicenii import (Axis, SliceniiError, guess_volume_axis, check_axis,
                       plane_offset, slice_volume, split_volume)
from .volume import Volume
from .utils import nii_basename, slice_file_name, slices_dir_name
from .info import __version__


prog_descrip = """Split a 3D Nifti file into a series of single plane Nifti
files along one axis, or a 4D Nifti file into its 3D volumes. Each plane is
placed where it was in the original volume."""


AUTO = 'auto'
'''Value of the --axis option asking for the axis to be guessed'''


def parse_axis(axis_str):
    '''Convert the --axis option to an Axis, or AUTO'''
    if axis_str.lower() == AUTO:
        return AUTO
    try:
        return Axis.from_index(int(axis_str))
    except ValueError:
        raise argparse.ArgumentTypeError("Axis must be 0, 1, 2, 3 or 'auto' "
                                         "to indicate the 1st (x), 2nd (y), "
                                         "3rd (z) or time axis")


def choose_axis(volume, axis):
    '''Resolve the axis to slice `volume` along. An `axis` of AUTO is
    guessed, None falls back to the first axis (or time for 4D input).'''
    if volume.ndim == 4:
        if axis is None or axis == AUTO:
            return Axis.T
        if axis != Axis.T:
            raise SliceniiError("Input Nifti file is 4D, it can only be split "
                                "along time (axis 3). Tip: You can use a "
                                "utility like `fslsplit` to split a 4D file "
                                "into 3D files.")
        return axis
    if volume.ndim != 3:
        raise SliceniiError("Input Nifti file must be 3D or 4D, got shape %s"
                            % (volume.shape,))
    if axis == Axis.T:
        raise SliceniiError("Input Nifti file is 3D, it can not be split "
                            "along time")
    if axis is None:
        return Axis.X

    guess = guess_volume_axis(volume.shape, volume.voxel_sizes)
    if axis != AUTO:
        return check_axis(axis, guess)
    if volume.slice_dim is not None:
        return Axis(volume.slice_dim)
    if not guess.determined:
        warnings.warn("Unable to guess the slice axis, scores: %s" %
                      (guess.scores,))
    return guess.best()


def main(argv=sys.argv):
    #Handle command line options
    arg_parser = argparse.ArgumentParser(description=prog_descrip)
    arg_parser.add_argument('input', nargs='?', help='The input Nifti file.')

    output_opt = arg_parser.add_argument_group('Output options')
    output_opt.add_argument('-o', '--output', default='./',
                            help=('An output directory which must already '
                            'exist. A new directory will be created within it '
                            'to store the slices. Default: %(default)s'))
    output_opt.add_argument('--output-ext', default='.nii',
                            choices=('.nii', '.nii.gz'),
                            help=('The extension for the output file type. '
                            'Default: %(default)s'))
    output_opt.add_argument('--keep-affine', default=False,
                            action='store_true',
                            help=('Write every slice with the affine of the '
                            'input instead of placing it at its position in '
                            'the original volume.'))

    slice_opt = arg_parser.add_argument_group('Slicing options')
    slice_opt.add_argument('-a', '--axis', default=None, type=parse_axis,
                           help=('The axis to slice along: 0, 1, or 2 for the '
                           'first, second, or third axis, 3 to split a 4D '
                           'file along time, or "auto" to guess. Default: 0 '
                           'for a 3D file, 3 for a 4D file'))
    slice_opt.add_argument('-p', '--pad', default=1, type=int,
                           help=('Repeat each slice this many times along the '
                           'slice axis, making a thin 3D volume. '
                           'Default: %(default)s'))

    gen_opt = arg_parser.add_argument_group('General Options')
    gen_opt.add_argument('-v', '--verbose',  default=False, action='store_true',
                         help=('Print additional information.'))
    gen_opt.add_argument('--version', default=False, action='store_true',
                         help=('Show the version and exit.'))

    args = arg_parser.parse_args(argv[1:])

    if args.version:
        print(__version__)
        return 0

    if args.input is None:
        arg_parser.error('No input file was provided.')
    if args.pad < 1:
        arg_parser.error('The padding must be at least 1.')

    try:
        return slice_file(args.input,
                          args.output,
                          args.axis,
                          args.pad,
                          args.output_ext,
                          not args.keep_affine,
                          args.verbose)
    except (SliceniiError, OSError, ImageFileError, ValueError) as e:
        print('Error: %s' % e, file=sys.stderr)
        return 1


def slice_file(in_path, out_dir, axis=None, padding=1, output_ext='.nii',
               reposition=True, verbose=False):
    '''Slice the Nifti file `in_path`, writing the planes into a new
    directory under `out_dir`. Returns the exit status.'''
    if not os.path.exists(out_dir):
        raise FileNotFoundError("Did not find output directory: %s" % out_dir)
    if not os.path.isdir(out_dir):
        raise NotADirectoryError("Output is not a directory: %s" % out_dir)

    basename = nii_basename(in_path)
    if not basename:
        raise SliceniiError("Could not parse input file name: %s" % in_path)

    volume = Volume.from_filename(in_path)
    if verbose:
        print("Loaded %s with shape %s" % (in_path, volume.shape))
    axis = choose_axis(volume, axis)
    if verbose:
        print("Slicing along axis %s" % axis)

    #Compute everything before writing so errors leave no partial output
    if axis == Axis.T:
        results = split_volume(volume)
    else:
        results = slice_volume(volume, axis, padding, reposition)

    save_dir = os.path.join(out_dir, slices_dir_name(basename))
    os.makedirs(save_dir, exist_ok=True)
    for plane, plane_vol in results:
        out_fn = slice_file_name(basename,
                                 axis,
                                 plane.ordinal,
                                 padding > 1,
                                 output_ext)
        out_path = os.path.join(save_dir, out_fn)
        if verbose:
            if axis == Axis.T:
                print("Writing volume %d to %s" % (plane.ordinal, out_path))
            else:
                offset = plane_offset(plane.ordinal, axis,
                                      volume.voxel_sizes)
                print("Writing slice %d (%.3f mm along axis %s) to %s" %
                      (plane.ordinal, offset, axis, out_path))
        plane_vol.to_filename(out_path)

    if verbose:
        print("Wrote %d files to %s" % (len(results), save_dir))
    return 0


if __name__ == '__main__':
    sys.exit(main())
