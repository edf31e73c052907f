"""
Bundled package descriptors.

Each <name>.json file in this directory is one descriptor.
"""

import os
from pathlib import PurePath
from typing import List

from kitbrew.descriptor_models import PackageDescriptor
from kitbrew.kitbrew_exceptions import MalformedDescriptorError

FORMULAS_DIRECTORY = os.path.abspath(os.path.dirname(__file__))


def available_formulas() -> List[str]:
    """Names of the bundled descriptors, sorted."""
    return sorted(
        name[: -len(".json")]
        for name in os.listdir(FORMULAS_DIRECTORY)
        if name.endswith(".json")
    )


def load_formula(name: str) -> PackageDescriptor:
    """
    Load a bundled descriptor by package name.

    Raises:
        MalformedDescriptorError: If no such formula is bundled or it is invalid
    """
    if name not in available_formulas():
        raise MalformedDescriptorError(
            f"Unknown formula {name!r}; available: {', '.join(available_formulas())}"
        )
    return PackageDescriptor.from_json_file(str(PurePath(FORMULAS_DIRECTORY, f"{name}.json")))
