[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "deskmenu"
version = "0.1.0"
description = "Desktop entry parsing, ranking, history and launching helpers for dmenu-style application menus"
requires-python = ">=3.10"
dependencies = []
keywords = ["dmenu", "desktop-entry", "launcher", "xdg", "i3"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: X11 Applications",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["deskmenu"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
