import io
import sys

from setuptools import find_packages, setup

with io.open('calysto_asm/_version.py', encoding="utf-8") as fid:
    for line in fid:
        if line.startswith('__version__'):
            __version__ = line.strip().split()[-1][1:-1]
            break

with open('README.md') as f:
    readme = f.read()

setup(name='calysto_asm',
      version=__version__,
      description='An interpreter and Jupyter kernel for a small register assembly language, based on MetaKernel',
      long_description=readme,
      long_description_content_type='text/markdown',
      url="https://github.com/Calysto/calysto_asm",
      install_requires=["metakernel", "jupyter_client", "ipython"],
      extras_require={'test': ["pytest", "metakernel<1.0"]},
      packages=find_packages(include=["calysto_asm", "calysto_asm.*"]),
      classifiers = [
          'Framework :: IPython',
          'License :: OSI Approved :: BSD License',
          'Programming Language :: Python :: 3',
          'Programming Language :: Assembly',
          'Topic :: System :: Shells',
      ]
)
