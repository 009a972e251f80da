from setuptools import setup, find_packages

__package_name__ = "boolsim"
__description__ = "Simulation and attractor search for synchronous Boolean networks given as tables of update rules."

__version__ = open("boolsim/_version.py", "rt").read().split('\'')[1]

setup(
      name = __package_name__,
      version = __version__,
      description = __description__,
      long_description = __description__,

      license = "MIT",

      packages = find_packages(exclude=["tests", "tests.*"]),

      python_requires = ">=3.8",

      classifiers = [
          "Programming Language :: Python :: 3",
      ],

      install_requires = [
          "numpy",
          "networkx",
          "requests",
      ],

      extras_require = {
          "test": ["pytest"],
      },
)
