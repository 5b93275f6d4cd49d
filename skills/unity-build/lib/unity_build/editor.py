#!/usr/bin/env python3
"""
Unity Build Task - Editor Discovery

The editors root (the folder holding one sub-folder per installed Unity
version) comes from one of three strategies:

- HubPath: the default Unity Hub install location for the host
- EnvironmentVariablePath: UNITYHUB_EDITORS_FOLDER_LOCATION
- CustomPath: a folder given in the task configuration

EditorInstallation turns a root and a version into the editor executable.
"""

import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from .errors import ConfigurationError
from .pipeline import InputProvider

logger = logging.getLogger(__name__)

EDITORS_FOLDER_VARIABLE = "UNITYHUB_EDITORS_FOLDER_LOCATION"


@dataclass(frozen=True)
class HubPath:
    pass


@dataclass(frozen=True)
class EnvironmentVariablePath:
    variable: str = EDITORS_FOLDER_VARIABLE


@dataclass(frozen=True)
class CustomPath:
    path: Optional[str]


EditorsPathStrategy = Union[HubPath, EnvironmentVariablePath, CustomPath]


def editor_path_strategy(inputs: InputProvider) -> EditorsPathStrategy:
    """
    Select the editors root strategy from the 'unityEditorsPathMode' input.

    Raises:
        ConfigurationError: on an unknown mode
    """
    mode = inputs.get_input("unityEditorsPathMode") or "unityHub"

    if mode == "unityHub":
        return HubPath()
    if mode == "environmentVariable":
        return EnvironmentVariablePath()
    if mode in ("specify", "custom"):
        return CustomPath(inputs.get_input("customUnityEditorsPath"))

    raise ConfigurationError(
        f"Unknown editors path mode '{mode}'. "
        "Expected 'unityHub', 'environmentVariable' or 'specify'."
    )


def hub_editors_root(host_platform: str = sys.platform) -> Path:
    """Default Unity Hub editors folder for the host platform."""
    if host_platform == "win32":
        return Path("C:\\Program Files") / "Unity" / "Hub" / "Editor"
    if host_platform == "darwin":
        return Path("/Applications") / "Unity" / "Hub" / "Editor"
    return Path.home() / "Unity" / "Hub" / "Editor"


def resolve_editors_root(strategy: EditorsPathStrategy,
                         environ: Optional[Mapping[str, str]] = None,
                         host_platform: str = sys.platform) -> Path:
    """
    Resolve a strategy to the editors root folder.

    Args:
        strategy: One of HubPath, EnvironmentVariablePath, CustomPath
        environ: Environment to read from (defaults to os.environ)
        host_platform: sys.platform value of the machine running the task

    Raises:
        ConfigurationError: if the strategy yields no path
    """
    if environ is None:
        environ = os.environ

    if isinstance(strategy, HubPath):
        return hub_editors_root(host_platform)

    if isinstance(strategy, EnvironmentVariablePath):
        value = environ.get(strategy.variable)
        if not value:
            raise ConfigurationError(f"Expected {strategy.variable} environment variable to be set!")
        return Path(value)

    if isinstance(strategy, CustomPath):
        if not strategy.path:
            raise ConfigurationError(
                "Expected custom editors folder location to be set. Please check the task configuration."
            )
        return Path(strategy.path)

    raise ConfigurationError(f"Unsupported editors path strategy: {strategy!r}")


def check_path(path: Path, description: str) -> Path:
    """
    Make sure a path exists.

    Raises:
        IOError: if it does not
    """
    if not Path(path).exists():
        raise IOError(f"Not found {description}: {path}")
    return path


def _version_key(name: str):
    # 2021.3.1f1 -> (2021, 3, 1, 'f', 1)
    parts = re.findall(r"\d+|[a-zA-Z]+", name)
    return [(0, int(p), "") if p.isdigit() else (1, 0, p) for p in parts]


def list_installed_versions(editors_root: Path) -> list[str]:
    """
    List editor versions installed under an editors root, newest first.

    Returns:
        Version folder names, or an empty list if the root does not exist
    """
    root = Path(editors_root)
    if not root.is_dir():
        return []

    versions = []
    try:
        for item in root.iterdir():
            if item.is_dir() and item.name[:1].isdigit():
                versions.append(item.name)
    except OSError as e:
        logger.debug(f"Cannot list {root}: {e}")

    versions.sort(key=_version_key, reverse=True)
    return versions


class EditorInstallation:
    """
    A specific Unity editor version under an editors root.

    Args:
        editors_root: Folder with one sub-folder per installed version
        version: Editor version, e.g. 2021.3.1f1
        host_platform: sys.platform value of the machine running the task
    """

    def __init__(self, editors_root: Path, version: str, host_platform: str = sys.platform):
        self.editors_root = Path(editors_root)
        self.version = version
        self.host_platform = host_platform

    @property
    def directory(self) -> Path:
        if self.host_platform == "darwin":
            return self.editors_root / self.version
        return self.editors_root / self.version / "Editor"

    @property
    def executable(self) -> Path:
        if self.host_platform == "win32":
            return self.directory / "Unity.exe"
        if self.host_platform == "darwin":
            return self.directory / "Unity.app" / "Contents" / "MacOS" / "Unity"
        return self.directory / "Unity"

    def validate(self) -> "EditorInstallation":
        """
        Make sure the editor directory exists.

        Raises:
            IOError: naming the installed versions when the requested one is missing
        """
        if not self.directory.exists():
            installed = list_installed_versions(self.editors_root)
            hint = f" (installed: {', '.join(installed)})" if installed else ""
            raise IOError(f"Not found Unity Editor Directory: {self.directory}{hint}")

        logger.info(f"Unity editor: {self.executable}")
        return self

    def __repr__(self):
        return f"EditorInstallation({str(self.editors_root)!r}, {self.version!r})"
