[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hfcalotrigger"
version = "0.1.0"
description = "Bit-accurate model of a forward-calorimeter trigger: tower unpacking, jets, taus, energy sums and output-link packing"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "trigger",
    "calorimeter",
    "jets",
    "taus",
    "fixed-point",
    "high-energy-physics",
]
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
    "Topic :: Scientific/Engineering :: Physics",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hfcalotrigger"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
