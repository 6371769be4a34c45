[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "clockwork"
version = "0.1.0"
description = "Reverse-mode autograd over scalars and score pairs, parameter registration and optimizers for tuning chess evaluation parameters"
requires-python = ">=3.10"
dependencies = []
keywords = ["chess", "evaluation", "autograd", "tuning", "optimizer", "adamw"]
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
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["clockwork"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
