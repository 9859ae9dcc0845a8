[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gridsynth"
version = "0.1.0"
description = "A polyphonic 3x3 oscillator-grid synthesiser engine with filters, LFO, reverb and chorus"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["synthesiser", "synth", "audio", "dsp", "oscillator", "wavetable", "midi"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Sound Synthesis",
]

[project.optional-dependencies]
test = [
    "pytest",
    "numpy",
]

[tool.hatch.build.targets.wheel]
packages = ["gridsynth"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
