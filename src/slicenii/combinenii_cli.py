"""
Command line interface for combining single plane Nifti files into a volume.
"""
import os, sys, argparse, warnings

from nibabel.filebasedimages import ImageFileError

from .slicenii import (Axis, SliceniiError, DimensionalityError,
                       guess_axis, check_axis,
                       combine_volumes, stack_volumes)
from .volume import Volume
from .utils import find_niftis, sort_keys
from .slicenii_cli import AUTO, parse_axis
from .info import __version__


prog_descrip = """Combine a series of Nifti files, as made by slicenii, into
a single 3D volume with the geometry of a reference Nifti file. Volumes split
along time can be stacked back into a 4D file."""


def choose_axis(first, reference, axis):
    '''Resolve the axis to combine along by comparing the first input volume
    to the reference. An `axis` of AUTO is guessed, falling back to time when
    no spatial axis stands out. None means the first axis.'''
    if axis is None:
        return Axis.X
    if axis == Axis.T:
        return axis
    guess = guess_axis(first.shape, reference.shape,
                       first.voxel_sizes, reference.voxel_sizes)
    if axis != AUTO:
        return check_axis(axis, guess)
    if not guess.determined:
        warnings.warn("Unable to guess the slice axis (scores %s), "
                      "stacking along time instead" % (guess.scores,))
        return Axis.T
    return guess.axis


def main(argv=sys.argv):
    arg_parser = argparse.ArgumentParser(description=prog_descrip)

    input_opt = arg_parser.add_argument_group('Input options')
    input_opt.add_argument('-i', '--input-dir', default='./',
                           help=('The input directory containing the Nifti '
                           'files. Default: %(default)s'))
    input_opt.add_argument('-r', '--reference', default=None,
                           help=('The original Nifti file, used as reference '
                           'for the shape and geometry of the output.'))
    input_opt.add_argument('-s', '--start-string', default='',
                           help=('Only files in the input directory starting '
                           'with this string are selected.'))
    input_opt.add_argument('--sort', default='name',
                           choices=sorted(sort_keys),
                           help=('Sort the selected files by name, or '
                           'numerically by the digits in their names. '
                           'Default: %(default)s'))

    output_opt = arg_parser.add_argument_group('Output options')
    output_opt.add_argument('-o', '--output', default='combined.nii',
                            help=('The output Nifti file name. '
                            'Default: %(default)s'))
    output_opt.add_argument('-f', '--force-overwrite', action='store_true',
                            help="Overwrite the output file if it exists")

    comb_opt = arg_parser.add_argument_group('Combining options')
    comb_opt.add_argument('-a', '--axis', default=None, type=parse_axis,
                          help=('The axis along which the volume was sliced: '
                          '0, 1, or 2 for the first, second, or third axis, '
                          '3 to stack along time, or "auto" to guess. '
                          'Default: 0'))

    gen_opt = arg_parser.add_argument_group('General Options')
    gen_opt.add_argument('-v', '--verbose',  default=False, action='store_true',
                         help=('Print additional information.'))
    gen_opt.add_argument('--version', default=False, action='store_true',
                         help=('Show the version and exit.'))

    args = arg_parser.parse_args(argv[1:])

    if args.version:
        print(__version__)
        return 0

    if args.reference is None:
        arg_parser.error('No reference file was provided. Use -r to pass '
                         'an existing file.')

    try:
        return combine_files(args.input_dir,
                             args.output,
                             args.reference,
                             args.axis,
                             args.start_string,
                             args.sort,
                             args.force_overwrite,
                             args.verbose)
    except (SliceniiError, OSError, ImageFileError, ValueError) as e:
        print('Error: %s' % e, file=sys.stderr)
        return 1


def combine_files(in_dir, out_path, ref_path, axis=None, start_string='',
                  sort_by='name', overwrite=False, verbose=False):
    '''Combine the Nifti files in `in_dir` starting with `start_string` and
    write the result to `out_path`. Returns the exit status.'''
    if os.path.exists(out_path) and not overwrite:
        raise FileExistsError("Output file already exists: %s. Pass "
                              "--force-overwrite to replace it." % out_path)

    src_paths = find_niftis(in_dir, start_string, sort_by,
                            exclude=[out_path, ref_path])
    if verbose:
        print("Found %d Nifti files in %s" % (len(src_paths), in_dir))
    if len(src_paths) == 0:
        raise SliceniiError("No Nifti files starting with %r found in %s" %
                            (start_string, in_dir))

    if not os.path.exists(ref_path):
        raise FileNotFoundError("Did not find reference Nifti file: %s" %
                                ref_path)
    reference = Volume.from_filename(ref_path)
    if reference.ndim != 3:
        raise DimensionalityError("Reference Nifti file must be 3D, got shape "
                                  "%s. Tip: You can use a utility like "
                                  "`fslsplit` to split a 4D file into 3D "
                                  "files." % (reference.shape,))

    volumes = []
    for src_path in src_paths:
        if verbose:
            print("Loading %s to index %d" % (src_path, len(volumes)))
        vol = Volume.from_filename(src_path)
        if vol.ndim != 3:
            raise DimensionalityError("Input Nifti file %s must be 3D, got "
                                      "shape %s" % (src_path, vol.shape))
        volumes.append(vol)

    axis = choose_axis(volumes[0], reference, axis)
    if verbose:
        print("Combining along axis %s" % axis)

    if axis == Axis.T:
        result = stack_volumes(volumes, reference)
    else:
        result = combine_volumes(volumes, axis, reference)

    if verbose:
        print("Final shape: %s" % (result.shape,))
    result.to_filename(out_path)
    return 0


if __name__ == '__main__':
    sys.exit(main())
