"""
Install plan management.

This package handles resolving a descriptor into the concrete values of one
install and tracking its status.
"""

from .plan import InstallPlan, InstallStatus

__all__ = ["InstallPlan", "InstallStatus"]
