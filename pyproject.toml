[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "llolutil"
version = "0.1.0"
description = "Running statistics, timers, small linear-algebra helpers and a tiny Levenberg-Marquardt least squares solver"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "statistics",
    "timer",
    "least-squares",
    "levenberg-marquardt",
    "covariance",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
    "numpy",
]

[tool.hatch.build.targets.wheel]
packages = ["llolutil"]

[tool.pytest.ini_options]
addopts = "-ra"
