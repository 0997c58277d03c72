[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gw2assets"
version = "0.1.0"
description = "Pure-Python decoders for game texture formats (DXT, DDS, ATEX), model vertex and index buffers, and text resources."
requires-python = ">=3.10"
dependencies = []
keywords = ["dxt", "dds", "atex", "texture", "vertex", "decoder", "assets"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gw2assets"]

[tool.pytest.ini_options]
addopts = "-ra"
