#!/usr/bin/env python3
"""
Unity Build Task - Generated Editor Build Script

In default command line mode the build is driven by a C# editor script that
is generated from the build configuration and written into the project's
Assets/Editor folder before Unity starts. Unity then invokes it with
-executeMethod.
"""

import logging
from pathlib import Path

from .config import BuildConfiguration

logger = logging.getLogger(__name__)

SCRIPT_CLASS_NAME = "AzureDevOps"
SCRIPT_METHOD_NAME = "PerformBuild"
EXECUTE_METHOD = f"{SCRIPT_CLASS_NAME}.{SCRIPT_METHOD_NAME}"

SCRIPT_FOLDER = Path("Assets") / "Editor"
SCRIPT_FILE_NAME = f"{SCRIPT_CLASS_NAME}.cs"

_TEMPLATE = """\
// Generated by the Unity build pipeline task. Changes will be overwritten.
using System.Linq;
using UnityEditor;
using UnityEditor.Build.Reporting;
using UnityEngine;

public static class {class_name}
{{
    public static void {method_name}()
    {{
        string[] scenes = new string[] {{ {scenes} }};
        if (scenes.Length == 0)
        {{
            scenes = EditorBuildSettings.scenes
                .Where(scene => scene.enabled)
                .Select(scene => scene.path)
                .ToArray();
        }}

        BuildPlayerOptions options = new BuildPlayerOptions();
        options.scenes = scenes;
        options.locationPathName = "{location}";
        options.target = {target};
        options.options = {options};

        BuildReport report = BuildPipeline.BuildPlayer(options);
        bool succeeded = report.summary.result == BuildResult.Succeeded;
        Debug.Log("{class_name}: build " + report.summary.result + ", " + report.summary.totalErrors + " errors");
        EditorApplication.Exit(succeeded ? 0 : 1);
    }}
}}
"""


def _csharp_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def render_build_script(config: BuildConfiguration) -> str:
    """Render the C# build script for a configuration."""
    target = config.build_target
    location = f"{target.output_directory}/{config.output_file_name}{target.file_extension}"
    editor_target = (f"BuildTarget.{target.editor_target}" if target.editor_target
                     else "EditorUserBuildSettings.activeBuildTarget")

    return _TEMPLATE.format(
        class_name=SCRIPT_CLASS_NAME,
        method_name=SCRIPT_METHOD_NAME,
        scenes=", ".join(f'"{_csharp_string(s)}"' for s in config.build_scenes),
        location=_csharp_string(location),
        target=editor_target,
        options="BuildOptions.Development" if config.development_build else "BuildOptions.None",
    )


def write_build_script(config: BuildConfiguration) -> Path:
    """
    Write the build script into <project>/Assets/Editor.

    Returns:
        Path to the written script
    """
    script_dir = Path(config.project_path) / SCRIPT_FOLDER
    script_dir.mkdir(parents=True, exist_ok=True)

    script_path = script_dir / SCRIPT_FILE_NAME
    script_path.write_text(render_build_script(config), encoding="utf-8")

    logger.info(f"Wrote build script: {script_path}")
    return script_path
