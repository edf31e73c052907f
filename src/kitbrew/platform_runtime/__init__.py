"""
Platform runtimes.

This package provides the capability interface a package descriptor depends
on, and the implementation backed by the local machine.
"""

from .runtime import PlatformRuntime
from .local_runtime import LocalRuntime

__all__ = ["PlatformRuntime", "LocalRuntime"]
