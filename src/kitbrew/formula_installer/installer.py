"""
Formula installer implementation.

Runs a descriptor's install sequence against a platform runtime.
"""

import logging
from typing import Optional

from kitbrew.descriptor_models import PackageDescriptor
from kitbrew.install_plan import InstallPlan, InstallStatus
from kitbrew.kitbrew_exceptions import KitbrewException, UnsupportedPlatformError
from kitbrew.kitbrew_logger import KitbrewLogger
from kitbrew.platform_runtime import PlatformRuntime


class FormulaInstaller:
    """
    Installs packages described by a PackageDescriptor.

    The sequence is linear and has exactly two branches:
    1. The platform check fails: nothing is downloaded, UnsupportedPlatformError
    2. The platform check passes: download and verify, extract, install

    Nothing is retried. Any failure marks the plan failed and is re-raised.
    """

    def __init__(self, runtime: PlatformRuntime, logger: KitbrewLogger):
        """
        Initialize the formula installer.

        Args:
            runtime: Host capabilities (architecture, download, extraction, bin directory)
            logger: Logger for progress and error messages
        """
        self.runtime = runtime
        self.logger = logger

    def install(
        self, descriptor: PackageDescriptor, platform: Optional[str] = None
    ) -> InstallPlan:
        """
        Install a package.

        Args:
            descriptor: The package to install
            platform: Platform key of the artifact, defaults to the descriptor's default

        Returns:
            The completed InstallPlan

        Raises:
            UnsupportedPlatformError: If the host fails the platform requirement
            KitbrewException: If resolution, download, verification, extraction or install fails
        """
        if not descriptor.check_platform(self.runtime):
            self.logger.log(
                f"Hardware not supported: {descriptor.name} requires "
                f"{descriptor.platform_requirement.value}",
                logging.ERROR,
            )
            raise UnsupportedPlatformError(
                descriptor.name, descriptor.platform_requirement.value
            )

        plan = InstallPlan.from_descriptor(descriptor, platform)
        self.logger.log(
            f"Installing {plan.package} {plan.version} from {plan.url}",
            logging.INFO,
        )

        try:
            plan.status = InstallStatus.IN_PROGRESS
            plan.archive_path = self.runtime.download_and_verify(plan.url, plan.checksum)
            extracted = self.runtime.extract(plan.archive_path)
            installed = descriptor.install(extracted, self.runtime.bin_directory())
        except KitbrewException as e:
            plan.mark_failed(e.message)
            self.logger.log(
                f"Failed to install {plan.package} {plan.version}: {e.message}",
                logging.ERROR,
            )
            raise

        plan.mark_completed(installed)
        self.logger.log(
            f"Successfully installed {plan.package} {plan.version}: "
            + ", ".join(str(p) for p in installed),
            logging.INFO,
        )
        return plan
