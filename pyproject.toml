[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nemu"
version = "0.1.0"
description = "Building blocks of a small emulator: guest memory, memory-mapped devices, instruction decoders and a simple debugger"
requires-python = ">=3.10"
dependencies = []
keywords = ["emulator", "riscv", "mips", "loongarch", "debugger", "mmio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nemu"]

[tool.pytest.ini_options]
addopts = "-ra"
