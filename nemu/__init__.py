"""Emulator building blocks: guest memory, devices, instruction sets and a debugger."""

__version__ = "0.1.0"