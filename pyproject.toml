[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jjymon"
version = "0.1.0"
description = "Software receiver and decoder for the JJY longwave time signal, with fixed-point DSP and a monochrome frame buffer."
requires-python = ">=3.10"
dependencies = []
keywords = ["jjy", "time signal", "radio clock", "sdr", "timecode", "fixed-point"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Time Synchronization",
    "Topic :: Communications :: Ham Radio",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["jjymon"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
