"""
Default locations used by kitbrew. Nothing is created here; directories are
made on demand by the code that writes into them.
"""

import pathlib


class KitbrewSettings:
    """
    Provides the various settings for kitbrew
    """

    @staticmethod
    def get_kitbrew_directory() -> str:
        """
        Get the directory where kitbrew keeps its own state
        """
        return str(pathlib.Path.home() / ".kitbrew")

    @staticmethod
    def get_global_cache_directory() -> str:
        """
        Get the directory where downloaded and extracted artifacts are stored
        """
        return str(pathlib.PurePath(KitbrewSettings.get_kitbrew_directory(), "cache"))

    @staticmethod
    def get_default_prefix() -> str:
        """
        Get the default install prefix; binaries land in <prefix>/bin
        """
        return str(pathlib.Path.home() / ".local")
