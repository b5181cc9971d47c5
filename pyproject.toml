[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "plumeview"
version = "0.1.0"
description = "Viewer for 1024x1024 tile maps with embedded tilesets and extended level (eLVL) metadata"
requires-python = ">=3.10"
keywords = ["map", "tiles", "level", "elvl", "viewer", "tileset"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: X11 Applications",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Multimedia :: Graphics :: Viewers",
]
dependencies = [
    "numpy",
    "pillow",
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
plumeview = "plumeview.viewer:main"

[tool.hatch.build.targets.wheel]
packages = ["plumeview"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
