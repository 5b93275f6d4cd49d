#!/usr/bin/env python3
"""
Unity Build Task - Build Runner

Runs the whole task:

    Configuring -> Validating -> PreparingOutput -> BuildingCommand -> Executing
        -> Succeeded | Failed

Any error at any stage ends the run as Failed with the error message.
Nothing is rolled back; directories created so far stay in place.
"""

import argparse
import json
import logging
import subprocess
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .command import EditorCommand, build_command
from .config import (
    CLEAN_BUILD_VARIABLE,
    REPOSITORY_PATH_VARIABLE,
    CommandLineMode,
    get_build_configuration,
    get_repository_root,
    is_clean_build,
)
from .editor import (
    EDITORS_FOLDER_VARIABLE,
    EditorInstallation,
    editor_path_strategy,
    list_installed_versions,
    resolve_editors_root,
)
from .errors import BuildProcessError
from .output import prepare_output_directory, repository_relative
from .pipeline import (
    DictInputProvider,
    EnvironmentInputProvider,
    InputProvider,
    PipelineReporter,
    TaskResult,
)

logger = logging.getLogger(__name__)

BUILD_OUTPUT_PATH_VARIABLE = "buildOutputPath"
EDITOR_LOG_FILE_PATH_VARIABLE = "editorLogFilePath"


class BuildState(Enum):
    CONFIGURING = "Configuring"
    VALIDATING = "Validating"
    PREPARING_OUTPUT = "PreparingOutput"
    BUILDING_COMMAND = "BuildingCommand"
    EXECUTING = "Executing"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


@dataclass
class BuildResult:
    succeeded: bool
    message: str
    state: BuildState
    failed_stage: Optional[BuildState] = None
    exit_code: Optional[int] = None
    output_path: Optional[Path] = None
    log_file_path: Optional[Path] = None

    def to_dict(self):
        return {
            "status": self.state.value,
            "succeeded": self.succeeded,
            "message": self.message,
            "failed_stage": self.failed_stage.value if self.failed_stage else None,
            "exit_code": self.exit_code,
            "output_path": str(self.output_path) if self.output_path else None,
            "log_file_path": str(self.log_file_path) if self.log_file_path else None,
        }


def run_editor(command: EditorCommand, cwd: Optional[Path] = None) -> int:
    """
    Run the editor and block until it exits.

    Output is not captured so it streams into the pipeline log. There is no
    timeout: the build runs as long as the editor does.

    Returns:
        The editor's exit code
    """
    logger.info(f"Running: {command}")
    completed = subprocess.run(command.argv, cwd=str(cwd) if cwd else None)
    logger.info(f"Unity editor exited with code {completed.returncode}")
    return completed.returncode


def _editor_environ(inputs: InputProvider) -> dict:
    # Only the variable the editors path strategy may need
    value = inputs.get_env(EDITORS_FOLDER_VARIABLE)
    return {EDITORS_FOLDER_VARIABLE: value} if value else {}


def _output_is_empty(output_path: Path) -> bool:
    return not any(output_path.iterdir())


class UnityBuildTask:
    """
    One run of the Unity build task.

    Args:
        inputs: Source of task inputs, pipeline variables and environment
        reporter: Receives output variables and the final result
        host_platform: sys.platform value of the machine running the task
        runner: Callable(command, cwd) -> exit code, defaults to run_editor
    """

    def __init__(self,
                 inputs: InputProvider,
                 reporter: Optional[PipelineReporter] = None,
                 host_platform: str = sys.platform,
                 runner: Optional[Callable[[EditorCommand, Path], int]] = None):
        self.inputs = inputs
        self.reporter = reporter or PipelineReporter()
        self.host_platform = host_platform
        self.runner = runner or run_editor
        self.state = BuildState.CONFIGURING

    def _enter(self, state: BuildState):
        logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state

    def run(self) -> BuildResult:
        """Run the build and report the result. Never raises."""
        self.state = BuildState.CONFIGURING
        output_path = None
        log_file_path = None
        exit_code = None

        try:
            config = get_build_configuration(self.inputs, self.host_platform)
            strategy = editor_path_strategy(self.inputs)
            editors_root = resolve_editors_root(strategy, _editor_environ(self.inputs), self.host_platform)
            repository_root = get_repository_root(self.inputs)

            self._enter(BuildState.VALIDATING)
            installation = EditorInstallation(editors_root, config.unity_version, self.host_platform)
            installation.validate()

            self._enter(BuildState.PREPARING_OUTPUT)
            output_path = prepare_output_directory(config, clean=is_clean_build(self.inputs))
            self.reporter.set_variable(BUILD_OUTPUT_PATH_VARIABLE,
                                       repository_relative(output_path, repository_root))

            self._enter(BuildState.BUILDING_COMMAND)
            command, log_file_path = build_command(config, installation, self.inputs, repository_root)
            if log_file_path:
                self.reporter.set_variable(EDITOR_LOG_FILE_PATH_VARIABLE, str(log_file_path))

            self._enter(BuildState.EXECUTING)
            exit_code = self.runner(command, config.project_path)

            # With the generated build script a zero exit must also leave a player behind
            if exit_code != 0:
                raise BuildProcessError(f"Unity editor exited with code {exit_code}", exit_code)
            if config.command_line_mode is CommandLineMode.DEFAULT and _output_is_empty(output_path):
                raise BuildProcessError(f"Unity build produced no output in {output_path}", exit_code)

        except Exception as e:
            failed_stage = self.state
            self._enter(BuildState.FAILED)
            message = str(e)
            logger.error(f"Build failed during {failed_stage.value}: {message}")
            self.reporter.set_result(TaskResult.FAILED, message)
            return BuildResult(
                succeeded=False,
                message=message,
                state=self.state,
                failed_stage=failed_stage,
                exit_code=exit_code,
                output_path=output_path,
                log_file_path=log_file_path,
            )

        self._enter(BuildState.SUCCEEDED)
        message = f"Unity build for {config.build_target.value} succeeded"
        logger.info(message)
        self.reporter.set_result(TaskResult.SUCCEEDED, message)
        return BuildResult(
            succeeded=True,
            message=message,
            state=self.state,
            exit_code=exit_code,
            output_path=output_path,
            log_file_path=log_file_path,
        )


def _cli_overrides(args: argparse.Namespace) -> tuple[dict, dict]:
    """Map command line options onto task inputs and pipeline variables."""
    inputs = {}
    variables = {}

    text_options = {
        "build_target": "buildTarget",
        "project_path": "unityProjectPath",
        "editors_path_mode": "unityEditorsPathMode",
        "editors_path": "customUnityEditorsPath",
        "output_file_name": "outputFileName",
        "scenes": "buildScenes",
        "log_file": "logFileName",
    }
    for option, input_name in text_options.items():
        value = getattr(args, option)
        if value is not None:
            inputs[input_name] = str(value)

    flag_options = {
        "development_build": "developmentBuild",
        "no_package_manager": "noPackageManager",
        "accept_api_update": "acceptApiUpdate",
        "no_graphics": "noGraphics",
    }
    for option, input_name in flag_options.items():
        if getattr(args, option):
            inputs[input_name] = "true"

    if args.editors_path is not None and args.editors_path_mode is None:
        inputs["unityEditorsPathMode"] = "specify"

    if args.custom_args is not None:
        inputs["commandLineArgumentsMode"] = "custom"
        inputs["customCommandLineArguments"] = args.custom_args

    if args.repository_root is not None:
        variables[REPOSITORY_PATH_VARIABLE] = str(args.repository_root)
    if args.clean:
        variables[CLEAN_BUILD_VARIABLE] = "true"

    return inputs, variables


def main(argv=None):
    """CLI Entry point"""
    parser = argparse.ArgumentParser(
        description="Build a Unity project with the Unity editor in batch mode",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Inside a pipeline (inputs come from INPUT_* environment variables)
  python unity-build.py

  # Build a Win64 player with the Unity Hub editor
  python unity-build.py --build-target Win64 --project-path /path/to/project

  # Use editors from a custom folder and write the editor log
  python unity-build.py --build-target Android --editors-path /opt/unity --log-file build.log

  # Pass your own editor arguments instead of the generated build script
  python unity-build.py --build-target Linux64 --custom-args "-quit -executeMethod MyBuild.Run"

  # List installed editor versions
  python unity-build.py --list-editors

Environment Variables:
  UNITYHUB_EDITORS_FOLDER_LOCATION - Editors folder for --editors-path-mode environmentVariable
        """
    )

    parser.add_argument("--build-target", help="Target platform, e.g. Win64, Android, WebGL")
    parser.add_argument("--project-path", type=Path, help="Unity project folder (default: repository root)")
    parser.add_argument(
        "--editors-path-mode",
        choices=["unityHub", "environmentVariable", "specify"],
        help="How to find the Unity editors folder (default: unityHub)"
    )
    parser.add_argument("--editors-path", type=Path, help="Unity editors folder (implies --editors-path-mode specify)")
    parser.add_argument("--output-file-name", help="Player file name without extension (default: drop)")
    parser.add_argument("--development-build", action="store_true", help="Build a development player")
    parser.add_argument("--scenes", help="Comma separated scenes to build (default: scenes enabled in build settings)")
    parser.add_argument("--no-package-manager", action="store_true", help="Pass -noUpm")
    parser.add_argument("--accept-api-update", action="store_true", help="Pass -accept-apiupdate")
    parser.add_argument("--no-graphics", action="store_true", help="Pass -nographics")
    parser.add_argument("--custom-args", help="Custom editor arguments, replaces the generated build script")
    parser.add_argument("--log-file", help="Editor log file name, written to the repository root")
    parser.add_argument("--repository-root", type=Path, help="Repository root (default: Build.Repository.LocalPath or cwd)")
    parser.add_argument("--clean", action="store_true", help="Remove the build output directory first")
    parser.add_argument("--list-editors", action="store_true", help="List installed editor versions and exit")
    parser.add_argument("--json", action="store_true", help="Output the result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        format="[%(levelname)s] %(message)s",
        level=logging.DEBUG if args.verbose else logging.INFO
    )

    inputs, variables = _cli_overrides(args)
    provider = DictInputProvider(inputs, variables, fallback=EnvironmentInputProvider())

    if args.list_editors:
        try:
            root = resolve_editors_root(editor_path_strategy(provider), _editor_environ(provider))
        except Exception as e:
            logger.error(str(e))
            sys.exit(1)
        versions = list_installed_versions(root)
        if args.json:
            print(json.dumps({"editors_root": str(root), "versions": versions}, indent=2))
        else:
            print(f"Editors root: {root}")
            for version in versions:
                print(f"  {version}")
        sys.exit(0)

    # Keep stdout for logging commands unless JSON was asked for
    reporter = PipelineReporter(stream=sys.stderr if args.json else None)
    result = UnityBuildTask(provider, reporter).run()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

    sys.exit(0 if result.succeeded else 1)


if __name__ == "__main__":
    main()
