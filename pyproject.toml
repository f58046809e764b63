[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "opening_explorer"
version = "0.1.0"
description = "Compact binary storage model for a chess opening explorer: move statistics, game references, keys and history."
requires-python = ">=3.10"
dependencies = []
keywords = ["chess", "openings", "explorer", "statistics", "binary-format"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Board Games",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["opening_explorer"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
