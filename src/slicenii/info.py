""" Information for setup.py that we may also want to access in slicenii. Can
not import slicenii.
"""

_version_major = 0
_version_minor = 2
_version_micro = 0
_version_extra = 'dev'
__version__ = "%s.%s.%s%s" % (_version_major,
                              _version_minor,
                              _version_micro,
                              _version_extra)

CLASSIFIERS = ["Development Status :: 3 - Alpha",
               "Environment :: Console",
               "Intended Audience :: Science/Research",
               "License :: OSI Approved :: MIT License",
               "Operating System :: OS Independent",
               "Programming Language :: Python :: 3",
               "Topic :: Scientific/Engineering :: Medical Science Apps."]

description = ('Slice Nifti volumes into single plane stacks and combine '
               'them back together')

# Hard dependencies
install_requires = ['numpy',
                    'nibabel >= 3.0',
                   ]

# Extra requirements for building documentation and testing
extras_requires = {'doc':  ["sphinx", "numpydoc"],
                   'test': ['pytest'],
                  }


NAME                = 'slicenii'
AUTHOR              = "slicenii developers"
AUTHOR_EMAIL        = ""
MAINTAINER          = "slicenii developers"
MAINTAINER_EMAIL    = ""
URL                 = ""
DESCRIPTION         = description
LICENSE             = "MIT license"
CLASSIFIERS         = CLASSIFIERS
PLATFORMS           = "OS Independent"
ISRELEASE           = _version_extra == ''
VERSION             = __version__
INSTALL_REQUIRES    = install_requires
EXTRAS_REQUIRES      = extras_requires
PROVIDES            = ["slicenii"]
