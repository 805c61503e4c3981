[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "poshprompt"
version = "0.1.0"
description = "Prompt segments for shells: path, session, OS, weather, media and Go-style text templates"
requires-python = ">=3.10"
dependencies = []
keywords = ["prompt", "shell", "segments", "template", "terminal"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["poshprompt"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
