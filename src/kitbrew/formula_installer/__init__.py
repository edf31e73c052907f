"""
Formula installer.

This package handles:
1. Checking the host against the descriptor's platform requirement
2. Downloading and verifying the artifact
3. Extracting it
4. Running the descriptor's install step
"""

from .installer import FormulaInstaller

__all__ = ["FormulaInstaller"]
