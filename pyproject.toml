[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imagegate"
version = "0.1.0"
description = "Container image admission helpers: image references, policy violations, violation strategies, certificate configuration and tag-to-digest resolution for Kubernetes manifests"
requires-python = ">=3.10"
keywords = [
    "kubernetes",
    "container",
    "image",
    "digest",
    "manifest",
    "policy",
    "admission",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml>=6.0",
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[tool.hatch.build.targets.wheel]
packages = ["imagegate"]

[tool.hatch.build.targets.sdist]
include = ["imagegate", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
