from setuptools import setup, find_packages
import os

# Most of the relevant info is stored in this file
info_file = os.path.join('src', 'slicenii', 'info.py')
exec(open(info_file).read())


setup(name=NAME,
      python_requires=">=3.7",
      description=DESCRIPTION,
      long_description=open("README.rst").read(),
      long_description_content_type="text/x-rst",
      author=AUTHOR,
      author_email=AUTHOR_EMAIL,
      maintainer=MAINTAINER,
      maintainer_email=MAINTAINER_EMAIL,
      url=URL,
      license=LICENSE,
      classifiers=CLASSIFIERS,
      platforms=PLATFORMS,
      version=VERSION,
      provides=PROVIDES,
      packages=find_packages('src'),
      package_dir = {'':'src'},
      install_requires=INSTALL_REQUIRES,
      extras_require=EXTRAS_REQUIRES,
      entry_points = {'console_scripts' : \
                          ['slicenii = slicenii.slicenii_cli:main',
                           'combinenii = slicenii.combinenii_cli:main',
                          ],
                     },
     )
