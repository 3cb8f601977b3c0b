"""
Package for slicing Nifti volumes into stacks of single plane volumes that
keep their position in world space, and for combining such stacks back into
a single volume.
"""

from .slicenii import *
