"""
metarepo package

Provides the CLI entrypoint (`python -m metarepo.cli`) and the helpers that
turn an UPSTREAM manifest into a meta-repository build script.
"""

from .cli import main

__all__ = ["main"]
