[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "membench"
version = "0.1.0"
description = "Memory bandwidth benchmarks: a sequential XOR read, a multithreaded strided read, and the STREAM kernels"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["benchmark", "memory", "bandwidth", "stream", "performance"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = [
    "pytest",
    "numpy",
]

[project.scripts]
membench-naive = "membench.naive:main"
membench-threaded = "membench.threaded:main"
membench-stream = "membench.stream:main"

[tool.hatch.build.targets.wheel]
packages = ["membench"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
