"""
Command line driver.

    kitbrew install [FORMULA]   download, verify and install a package
    kitbrew resolve [FORMULA]   print the artifact URL and checksum
    kitbrew render [FORMULA]    print the Homebrew formula
    kitbrew bump [FORMULA]      write the descriptor of a new release

Exit status is 0 on success and 1 on any kitbrew error, including
unsupported hardware.
"""

import argparse
import logging
import pathlib
import sys
from typing import Dict, List, Optional

from kitbrew.descriptor_models import PackageDescriptor
from kitbrew.formula_installer import FormulaInstaller
from kitbrew.formula_renderer import render_formula
from kitbrew.formulas import load_formula
from kitbrew.kitbrew_config import KitbrewConfig
from kitbrew.kitbrew_exceptions import KitbrewException, UnsupportedPlatformError
from kitbrew.kitbrew_logger import KitbrewLogger
from kitbrew.platform_runtime import LocalRuntime, PlatformRuntime

DEFAULT_FORMULA = "kitcli"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kitbrew", description="Install packages from descriptors.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_formula_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("formula", nargs="?", default=None, help=f"Bundled formula (default: {DEFAULT_FORMULA})")
        p.add_argument("--formula-file", help="Path to a descriptor JSON file")

    install = subparsers.add_parser("install", help="Download, verify and install a package")
    add_formula_args(install)
    install.add_argument("--config", help="Path to a TOML file with a [kitbrew] table")
    install.add_argument("--platform", help="Platform key of the artifact to install")

    resolve = subparsers.add_parser("resolve", help="Print the artifact URL and checksum")
    add_formula_args(resolve)
    resolve.add_argument("--version", dest="release", help="Release version")
    resolve.add_argument("--platform", help="Platform key")

    render = subparsers.add_parser("render", help="Print the Homebrew formula")
    add_formula_args(render)
    render.add_argument("--out", help="Write the formula to this path")

    bump = subparsers.add_parser("bump", help="Write the descriptor of a new release")
    add_formula_args(bump)
    bump.add_argument("--version", dest="release", required=True, help="New release version")
    bump.add_argument(
        "--sha256",
        action="append",
        required=True,
        metavar="PLATFORM=HEX",
        help="Checksum of the release archive for one platform (repeatable)",
    )
    bump.add_argument("--out", help="Write the descriptor to this path")

    return parser


def load_descriptor(formula: Optional[str], formula_file: Optional[str]) -> PackageDescriptor:
    if formula_file:
        return PackageDescriptor.from_json_file(formula_file)
    return load_formula(formula or DEFAULT_FORMULA)


def parse_checksums(values: List[str]) -> Dict[str, str]:
    checksums = {}
    for value in values:
        platform, sep, digest = value.partition("=")
        if not sep or not platform or not digest:
            raise KitbrewException(f"Expected PLATFORM=HEX, got {value!r}")
        checksums[platform] = digest
    return checksums


def write_output(text: str, out: Optional[str]) -> None:
    if out is None:
        sys.stdout.write(text)
        return
    out_path = pathlib.Path(out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text, encoding="utf-8")


def run_install(args: argparse.Namespace, logger: KitbrewLogger, runtime: Optional[PlatformRuntime]) -> None:
    config = KitbrewConfig.from_toml(args.config) if args.config else KitbrewConfig()
    # A formula named on the command line wins over the configured formula file
    formula_file = args.formula_file or (config.formula_file if args.formula is None else None)
    descriptor = load_descriptor(args.formula, formula_file)

    local_runtime = None
    if runtime is None:
        runtime = local_runtime = LocalRuntime(config, logger)
    try:
        plan = FormulaInstaller(runtime, logger).install(descriptor, args.platform)
    finally:
        if local_runtime is not None:
            local_runtime.close()

    for path in plan.installed_paths:
        print(path)


def main(argv: Optional[List[str]] = None, runtime: Optional[PlatformRuntime] = None) -> int:
    """
    Entry point.

    Args:
        argv: Arguments, defaults to sys.argv[1:]
        runtime: Runtime used by install; a LocalRuntime is created if omitted

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(stream=sys.stderr, format="%(message)s")
    logger = KitbrewLogger()
    if args.verbose:
        logger.logger.setLevel(logging.DEBUG)

    try:
        if args.command == "install":
            run_install(args, logger, runtime)
        elif args.command == "resolve":
            descriptor = load_descriptor(args.formula, args.formula_file)
            url, checksum = descriptor.resolve_artifact(args.release, args.platform)
            print(f"url: {url}")
            print(f"sha256: {checksum}")
        elif args.command == "render":
            descriptor = load_descriptor(args.formula, args.formula_file)
            write_output(render_formula(descriptor), args.out)
        elif args.command == "bump":
            descriptor = load_descriptor(args.formula, args.formula_file)
            released = descriptor.with_release(args.release, parse_checksums(args.sha256))
            write_output(released.to_json(), args.out)
    except UnsupportedPlatformError:
        print("Hardware not supported", file=sys.stderr)
        return 1
    except KitbrewException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    return 0
