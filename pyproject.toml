[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "boom"
version = "0.1.0"
description = "Astronomical alert utilities: photometry conversions, FITS cutout preparation, catalog cross-matching and MongoDB helpers"
requires-python = ">=3.10"
keywords = ["astronomy", "alerts", "ztf", "lsst", "crossmatch", "fits", "mongodb"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Astronomy",
]
dependencies = [
    "pymongo",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["boom"]

[tool.pytest.ini_options]
addopts = "-ra"
