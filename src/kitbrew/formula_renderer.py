"""
Renders package descriptors as Homebrew formulae.

The rendered formula states the version once and builds the URL with
#{version} interpolation, so the Ruby file cannot drift from the descriptor.
"""

import re
from typing import List

from kitbrew.descriptor_models import PackageDescriptor, PlatformRequirement
from kitbrew.kitbrew_exceptions import FormulaRenderError

OS_CONDITIONS = {
    "darwin": "OS.mac?",
    "linux": "OS.linux?",
}

ARCH_CONDITIONS = {
    "amd64": "Hardware::CPU.intel?",
    "arm64": "Hardware::CPU.arm?",
}

UNSUPPORTED_MESSAGE = "Hardware not supported"


def formula_class_name(package_name: str) -> str:
    """kitcli -> Kitcli, kube-iter_tool -> KubeIterTool"""
    return "".join(part.capitalize() for part in re.split(r"[-_]", package_name) if part)


def ruby_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("#{", "\\#{")
    return f'"{escaped}"'


def ruby_url(descriptor: PackageDescriptor, platform: str) -> str:
    """The artifact URL as a Ruby string interpolating the formula's version."""
    literal = ruby_string(descriptor.url_template)
    return literal.replace("{version}", "#{version}").replace("{platform}", platform)


def _platform_condition(platform: str) -> str:
    os_name, _, arch = platform.partition("_")
    if os_name not in OS_CONDITIONS or arch not in ARCH_CONDITIONS:
        raise FormulaRenderError(f"No Homebrew condition for platform {platform!r}")
    return f"{OS_CONDITIONS[os_name]} && {ARCH_CONDITIONS[arch]}"


def _artifact_lines(descriptor: PackageDescriptor, platform: str, indent: str) -> List[str]:
    return [
        f"{indent}url {ruby_url(descriptor, platform)}",
        f"{indent}sha256 {ruby_string(descriptor.artifacts[platform].sha256)}",
    ]


def _source_lines(descriptor: PackageDescriptor, indent: str) -> List[str]:
    if len(descriptor.artifacts) == 1:
        return _artifact_lines(descriptor, descriptor.default_platform, indent)

    lines = []
    for i, platform in enumerate(sorted(descriptor.artifacts)):
        keyword = "if" if i == 0 else "elsif"
        lines.append(f"{indent}{keyword} {_platform_condition(platform)}")
        lines.extend(_artifact_lines(descriptor, platform, indent + "  "))
    lines.append(f"{indent}else")
    lines.append(f"{indent}  odie {ruby_string(UNSUPPORTED_MESSAGE)}")
    lines.append(f"{indent}end")
    return lines


def render_formula(descriptor: PackageDescriptor) -> str:
    """
    Render the descriptor as a Homebrew formula.

    Args:
        descriptor: The package descriptor

    Returns:
        Ruby source of the formula

    Raises:
        FormulaRenderError: If a platform key has no Homebrew equivalent
    """
    lines = [f"class {formula_class_name(descriptor.name)} < Formula"]
    if descriptor.description:
        lines.append(f"  desc {ruby_string(descriptor.description)}")
    lines.append(f"  homepage {ruby_string(descriptor.homepage)}")
    lines.append(f"  version {ruby_string(descriptor.version)}")
    lines.append("")

    if descriptor.platform_requirement == PlatformRequirement.SIXTY_FOUR_BIT:
        lines.append("  if Hardware::CPU.is_64_bit?")
        lines.extend(_source_lines(descriptor, "    "))
        lines.append("  else")
        lines.append(f"    odie {ruby_string(UNSUPPORTED_MESSAGE)}")
        lines.append("  end")
    else:
        lines.extend(_source_lines(descriptor, "  "))

    lines.append("")
    lines.append("  def install")
    for binary in descriptor.install_step.binaries:
        lines.append(f"    bin.install {ruby_string(binary)}")
    lines.append("  end")
    lines.append("end")
    return "\n".join(lines) + "\n"
