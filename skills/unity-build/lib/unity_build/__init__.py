"""
Unity Build Library

Builds a Unity project in a CI pipeline: finds the editor, prepares the output
folder, injects the generated build script and runs the editor in batch mode.
Used by the unity-build skill script and the unity-build console command.
"""

from .config import BuildConfiguration, CommandLineMode, get_build_configuration
from .editor import (
    CustomPath,
    EditorInstallation,
    EnvironmentVariablePath,
    HubPath,
    resolve_editors_root,
)
from .errors import BuildProcessError, ConfigurationError
from .pipeline import DictInputProvider, EnvironmentInputProvider, PipelineReporter
from .runner import BuildResult, BuildState, UnityBuildTask
from .targets import BuildTarget

__all__ = [
    "BuildConfiguration",
    "BuildProcessError",
    "BuildResult",
    "BuildState",
    "BuildTarget",
    "CommandLineMode",
    "ConfigurationError",
    "CustomPath",
    "DictInputProvider",
    "EditorInstallation",
    "EnvironmentInputProvider",
    "EnvironmentVariablePath",
    "HubPath",
    "PipelineReporter",
    "UnityBuildTask",
    "get_build_configuration",
    "resolve_editors_root",
]
