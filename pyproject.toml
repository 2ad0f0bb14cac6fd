[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jpegkit"
version = "0.1.0"
description = "JPEG decoder building blocks: inverse DCT variants, pooled memory management, virtual arrays and library error messages"
requires-python = ">=3.10"
dependencies = []
keywords = ["jpeg", "idct", "dct", "image", "decoder", "memory-pool"]
classifiers = [
    "Development Status :: 4 - Beta",
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
packages = ["jpegkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
