"""
kitbrew - install prebuilt binaries from declarative package descriptors.
"""

from kitbrew.descriptor_models import PackageDescriptor, PlatformRequirement
from kitbrew.formula_installer import FormulaInstaller
from kitbrew.formulas import load_formula
from kitbrew.platform_runtime import LocalRuntime, PlatformRuntime

__version__ = "0.1.0"

__all__ = [
    "PackageDescriptor",
    "PlatformRequirement",
    "FormulaInstaller",
    "load_formula",
    "LocalRuntime",
    "PlatformRuntime",
]
