#!/usr/bin/env python3
"""
Unity Build Task - Build Targets

Build target values accepted by the task and their Unity-side details:
output folder, editor BuildTarget member, and player file extension.
"""

from enum import Enum
from typing import Optional

from .errors import ConfigurationError


class BuildTarget(Enum):
    STANDALONE = "standalone"
    WIN = "Win"
    WIN64 = "Win64"
    OSX_UNIVERSAL = "OSXUniversal"
    LINUX = "Linux"
    LINUX64 = "Linux64"
    LINUX_UNIVERSAL = "LinuxUniversal"
    IOS = "iOS"
    ANDROID = "Android"
    WEBGL = "WebGL"
    XBOX_ONE = "XboxOne"
    PS4 = "PS4"
    WINDOWS_STORE_APPS = "WindowsStoreApps"
    SWITCH = "Switch"
    TVOS = "tvOS"

    @classmethod
    def parse(cls, value: Optional[str]) -> "BuildTarget":
        """
        Resolve a task input value to a BuildTarget (case-insensitive).

        Raises:
            ConfigurationError: if the value names no known target
        """
        wanted = (value or "").strip().lower()
        if wanted in _RETIRED_TARGETS:
            raise ConfigurationError(
                f"Build target '{value}' is no longer supported: {_RETIRED_TARGETS[wanted]}"
            )

        for target in cls:
            if target.value.lower() == wanted:
                return target

        valid = ", ".join(t.value for t in cls)
        raise ConfigurationError(
            f"Unknown build target '{value}'. Expected one of: {valid}"
        )

    @property
    def output_directory(self) -> str:
        """Output folder relative to the project root, e.g. Builds/Win64."""
        return f"Builds/{self.value}"

    @property
    def editor_target(self) -> Optional[str]:
        """
        Member of UnityEditor.BuildTarget used by the generated build script.

        None for 'standalone', which builds for the editor's active target.
        """
        return _EDITOR_TARGETS.get(self)

    @property
    def file_extension(self) -> str:
        """Player file extension, empty for targets that export a folder."""
        return _FILE_EXTENSIONS.get(self, "")

    @property
    def requires_windows(self) -> bool:
        # UWP players can only be produced by a Windows editor
        return self is BuildTarget.WINDOWS_STORE_APPS


# Targets the task once accepted whose editor support is gone
_RETIRED_TARGETS = {
    "n3ds": "Nintendo 3DS support was removed in Unity 2018.3",
}

# Unity 2019.2 dropped the 32-bit and universal Linux players; Linux and
# LinuxUniversal build the 64-bit player
_EDITOR_TARGETS = {
    BuildTarget.WIN: "StandaloneWindows",
    BuildTarget.WIN64: "StandaloneWindows64",
    BuildTarget.OSX_UNIVERSAL: "StandaloneOSX",
    BuildTarget.LINUX: "StandaloneLinux64",
    BuildTarget.LINUX64: "StandaloneLinux64",
    BuildTarget.LINUX_UNIVERSAL: "StandaloneLinux64",
    BuildTarget.IOS: "iOS",
    BuildTarget.ANDROID: "Android",
    BuildTarget.WEBGL: "WebGL",
    BuildTarget.XBOX_ONE: "XboxOne",
    BuildTarget.PS4: "PS4",
    BuildTarget.WINDOWS_STORE_APPS: "WSAPlayer",
    BuildTarget.SWITCH: "Switch",
    BuildTarget.TVOS: "tvOS",
}

_FILE_EXTENSIONS = {
    BuildTarget.WIN: ".exe",
    BuildTarget.WIN64: ".exe",
    BuildTarget.OSX_UNIVERSAL: ".app",
    BuildTarget.LINUX: ".x86_64",
    BuildTarget.LINUX64: ".x86_64",
    BuildTarget.LINUX_UNIVERSAL: ".x86_64",
    BuildTarget.ANDROID: ".apk",
}
