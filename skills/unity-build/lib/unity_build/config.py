#!/usr/bin/env python3
"""
Unity Build Task - Build Configuration

Resolves the task inputs into an immutable BuildConfiguration and reads the
editor version the project was saved with.
"""

import logging
import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from .errors import ConfigurationError
from .pipeline import InputProvider
from .targets import BuildTarget

logger = logging.getLogger(__name__)

PROJECT_VERSION_FILE = Path("ProjectSettings") / "ProjectVersion.txt"
REVISION_MARKER = "m_EditorVersionWithRevision"
DEFAULT_OUTPUT_FILE_NAME = "drop"

REPOSITORY_PATH_VARIABLE = "Build.Repository.LocalPath"
CLEAN_BUILD_VARIABLE = "Build.Repository.Clean"


class CommandLineMode(Enum):
    DEFAULT = "default"
    CUSTOM = "custom"


@dataclass(frozen=True)
class BuildConfiguration:
    """Everything the build needs to know, resolved once per run."""

    build_target: BuildTarget
    project_path: Path
    unity_version: str
    output_file_name: str = DEFAULT_OUTPUT_FILE_NAME
    development_build: bool = False
    build_scenes: Tuple[str, ...] = field(default_factory=tuple)
    command_line_mode: CommandLineMode = CommandLineMode.DEFAULT


def parse_editor_version(content: str) -> str:
    """
    Extract the editor version from ProjectVersion.txt content.

    'm_EditorVersion: 2021.3.1f1\\nm_EditorVersionWithRevision: 2021.3.1f1 (3b70a0754835)'
    yields '2021.3.1f1'.

    Raises:
        ConfigurationError: if no version can be found
    """
    _, sep, value = content.partition(":")
    version = ""
    if sep:
        marker = value.find(REVISION_MARKER)
        if marker > -1:
            value = value[:marker]
        version = value.strip()

    if not version:
        raise ConfigurationError("Failed to get project version from ProjectVersion.txt file.")

    return version


def read_project_version(project_path: Path) -> str:
    """
    Read the Unity version a project was last saved with.

    Raises:
        IOError: if ProjectVersion.txt is missing or unreadable
        ConfigurationError: if it holds no version
    """
    version_file = Path(project_path) / PROJECT_VERSION_FILE
    try:
        content = version_file.read_text(encoding="utf-8")
    except OSError as e:
        raise IOError(f"Cannot read project version file {version_file}: {e}") from e

    version = parse_editor_version(content)
    logger.debug(f"Project {project_path} uses Unity {version}")
    return version


def parse_build_scenes(value: Optional[str]) -> Tuple[str, ...]:
    """Split a comma, semicolon or newline separated scene list."""
    if not value:
        return ()
    return tuple(s.strip() for s in re.split(r"[,;\r\n]+", value) if s.strip())


def get_repository_root(inputs: InputProvider) -> Path:
    """Repository checkout root (absolute), falling back to the current directory."""
    local_path = inputs.get_variable(REPOSITORY_PATH_VARIABLE)
    if local_path:
        return Path(local_path).resolve()
    return Path.cwd()


def is_clean_build(inputs: InputProvider) -> bool:
    return (inputs.get_variable(CLEAN_BUILD_VARIABLE) or "").lower() == "true"


def get_build_configuration(inputs: InputProvider,
                            host_platform: str = sys.platform) -> BuildConfiguration:
    """
    Resolve the build configuration from task inputs.

    Args:
        inputs: Source of task inputs and pipeline variables
        host_platform: sys.platform value of the machine running the task

    Returns:
        BuildConfiguration for this run

    Raises:
        ConfigurationError: on missing, invalid or incompatible settings
        IOError: if the project version file cannot be read
    """
    build_target = BuildTarget.parse(inputs.get_input("buildTarget", required=True))

    if build_target.requires_windows and host_platform != "win32":
        raise ConfigurationError("Cannot build an UWP project on a non-Windows host.")

    # The editor runs with the project as cwd, so a relative path would resolve twice
    project_path = (inputs.get_path_input("unityProjectPath") or get_repository_root(inputs)).resolve()

    mode = (inputs.get_input("commandLineArgumentsMode") or CommandLineMode.DEFAULT.value).lower()
    try:
        command_line_mode = CommandLineMode(mode)
    except ValueError:
        raise ConfigurationError(
            f"Unknown command line arguments mode '{mode}'. Expected 'default' or 'custom'."
        )

    config = BuildConfiguration(
        build_target=build_target,
        project_path=project_path,
        unity_version=read_project_version(project_path),
        output_file_name=inputs.get_input("outputFileName") or DEFAULT_OUTPUT_FILE_NAME,
        development_build=inputs.get_bool_input("developmentBuild"),
        build_scenes=parse_build_scenes(inputs.get_input("buildScenes")),
        command_line_mode=command_line_mode,
    )

    logger.info(f"Build target: {config.build_target.value}")
    logger.info(f"Project: {config.project_path} (Unity {config.unity_version})")
    return config
