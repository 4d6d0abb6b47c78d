[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mdkit"
version = "1.0.0"
description = "Mega Drive sound and ROM tools: ESF to VGM conversion, EIF to TFI instrument conversion and ROM header generation"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "mega drive",
    "genesis",
    "vgm",
    "gd3",
    "esf",
    "echo",
    "ym2612",
    "sn76489",
    "tfi",
    "eif",
    "rom header",
]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
echo2vgm = "mdkit.echo2vgm:main"
eif2tfi = "mdkit.eif2tfi:main"
headgen = "mdkit.headgen:main"

[tool.hatch.build.targets.wheel]
packages = ["mdkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
