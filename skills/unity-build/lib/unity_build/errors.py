"""
Unity Build Task - Error Types

Every failure is raised where it is detected and converted into a single
Failed result by UnityBuildTask.run().
"""

from typing import Optional


class ConfigurationError(Exception):
    """Missing, invalid or incompatible task configuration."""


class BuildProcessError(Exception):
    """The Unity editor process did not complete the build."""

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.exit_code = exit_code
