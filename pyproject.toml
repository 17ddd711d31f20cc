[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mlxgfx"
version = "0.1.0"
description = "A small windowing and 2D image library: RGBA pixel buffers, PNG and XPM42 textures, input hooks and a depth-sorted render queue."
requires-python = ">=3.10"
dependencies = [
    "pillow",
    "pygame",
]
keywords = ["graphics", "window", "image", "texture", "xpm42", "png", "pixels", "rendering"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Software Development :: Libraries :: pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mlxgfx"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
