#!/usr/bin/env python3
"""
Unity Build Task - Editor Command Line

Mandatory arguments for every build:
    -batchmode      run Unity without UI
    -buildTarget    the configured target platform
    -projectPath    the project to load

Default mode adds the optional flags, the generated build script entry point
and an optional log file. Custom mode appends the user's arguments instead.
"""

import logging
import shlex
import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .build_script import EXECUTE_METHOD, write_build_script
from .config import BuildConfiguration, CommandLineMode
from .editor import EditorInstallation
from .pipeline import InputProvider

logger = logging.getLogger(__name__)

# Boolean task input -> editor flag, in command line order
OPTIONAL_FLAGS = [
    ("noPackageManager", "-noUpm"),
    ("acceptApiUpdate", "-accept-apiupdate"),
    ("noGraphics", "-nographics"),
]


class EditorCommand:
    """Ordered command line for one editor invocation."""

    def __init__(self, executable: Path, host_platform: str = sys.platform):
        self.executable = Path(executable)
        self.host_platform = host_platform
        self.args: List[str] = []

    def arg(self, value) -> "EditorCommand":
        """Append a single argument."""
        self.args.append(str(value))
        return self

    def line(self, text: str) -> "EditorCommand":
        """Append a raw argument string, split like a shell would."""
        self.args.extend(shlex.split(text, posix=self.host_platform != "win32"))
        return self

    @property
    def argv(self) -> List[str]:
        return [str(self.executable)] + self.args

    def __str__(self):
        if self.host_platform == "win32":
            return subprocess.list2cmdline(self.argv)
        return " ".join(shlex.quote(a) for a in self.argv)


def build_command(config: BuildConfiguration,
                  installation: EditorInstallation,
                  inputs: InputProvider,
                  repository_root: Path) -> Tuple[EditorCommand, Optional[Path]]:
    """
    Assemble the editor command line.

    In default mode this also writes the generated build script into the
    project.

    Args:
        config: Build configuration
        installation: Editor to run
        inputs: Source of the optional flag and log file inputs
        repository_root: Folder the log file is written to

    Returns:
        (command, log_file_path) where log_file_path is None unless a log
        file name is configured in default mode
    """
    cmd = (EditorCommand(installation.executable, installation.host_platform)
           .arg("-batchmode")
           .arg("-buildTarget").arg(config.build_target.value)
           .arg("-projectPath").arg(config.project_path))

    if config.command_line_mode is CommandLineMode.CUSTOM:
        custom_args = inputs.get_input("customCommandLineArguments")
        if custom_args:
            cmd.line(custom_args)
        logger.debug(f"Custom command line arguments: {custom_args}")
        return cmd, None

    for input_name, flag in OPTIONAL_FLAGS:
        if inputs.get_bool_input(input_name):
            cmd.arg(flag)

    write_build_script(config)
    cmd.arg("-executeMethod").arg(EXECUTE_METHOD)

    log_file_path = None
    log_file_name = inputs.get_input("logFileName")
    if log_file_name:
        log_file_path = Path(repository_root) / log_file_name
        cmd.arg("-logfile").arg(log_file_path)

    return cmd, log_file_path
