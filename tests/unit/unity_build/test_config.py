"""
Unit tests for build configuration resolution.

Tests ProjectVersion.txt parsing and the input -> BuildConfiguration mapping.
"""

import pytest
from dataclasses import FrozenInstanceError
from pathlib import Path

from unity_build.config import (
    BuildConfiguration,
    CommandLineMode,
    get_build_configuration,
    get_repository_root,
    is_clean_build,
    parse_build_scenes,
    parse_editor_version,
    read_project_version,
)
from unity_build.errors import ConfigurationError
from unity_build.pipeline import DictInputProvider
from unity_build.targets import BuildTarget


class TestParseEditorVersion:
    """Test editor version extraction from ProjectVersion.txt content."""

    def test_with_revision_line(self):
        content = "m_EditorVersion: 2021.3.1f1\nm_EditorVersionWithRevision: 2021.3.1f1 (3b70a0754835)\n"
        assert parse_editor_version(content) == "2021.3.1f1"

    def test_revision_marker_on_same_line(self):
        content = "m_EditorVersion: 2021.3.1f1 m_EditorVersionWithRevision: 2021.3.1f1 (3b70a0754835)"
        assert parse_editor_version(content) == "2021.3.1f1"

    def test_without_revision(self):
        assert parse_editor_version("m_EditorVersion: 2019.4.40f1\n") == "2019.4.40f1"

    def test_whitespace_trimmed(self):
        assert parse_editor_version("m_EditorVersion:    2020.3.0f1   \r\n") == "2020.3.0f1"

    def test_empty_version(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_editor_version("m_EditorVersion: \n")

        assert "ProjectVersion.txt" in str(exc_info.value)

    def test_no_separator(self):
        with pytest.raises(ConfigurationError):
            parse_editor_version("garbage")

    def test_only_revision(self):
        with pytest.raises(ConfigurationError):
            parse_editor_version("m_EditorVersion: m_EditorVersionWithRevision: 2021.3.1f1")


class TestReadProjectVersion:
    """Test reading ProjectVersion.txt from a project."""

    def test_read(self, temp_unity_project, unity_version):
        assert read_project_version(temp_unity_project) == unity_version

    def test_missing_file(self, tmp_path):
        with pytest.raises(IOError) as exc_info:
            read_project_version(tmp_path)

        assert "ProjectVersion.txt" in str(exc_info.value)


class TestParseBuildScenes:
    """Test scene list parsing."""

    def test_empty(self):
        assert parse_build_scenes(None) == ()
        assert parse_build_scenes("") == ()

    def test_separators(self):
        value = "Assets/Scenes/Main.unity, Assets/Scenes/Level1.unity;Assets/Scenes/Level2.unity\nAssets/End.unity"
        assert parse_build_scenes(value) == (
            "Assets/Scenes/Main.unity",
            "Assets/Scenes/Level1.unity",
            "Assets/Scenes/Level2.unity",
            "Assets/End.unity",
        )

    def test_blank_entries_dropped(self):
        assert parse_build_scenes(" ,A.unity,, ") == ("A.unity",)


class TestRepositoryVariables:
    """Test repository root and clean build variables."""

    def test_repository_root_from_variable(self):
        inputs = DictInputProvider(variables={"Build.Repository.LocalPath": "/agent/_work/1/s"})
        assert get_repository_root(inputs) == Path("/agent/_work/1/s")

    def test_repository_root_fallback_to_cwd(self):
        assert get_repository_root(DictInputProvider()) == Path.cwd()

    def test_relative_repository_root_is_made_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        inputs = DictInputProvider(variables={"Build.Repository.LocalPath": "."})

        root = get_repository_root(inputs)

        assert root.is_absolute()
        assert root == tmp_path

    def test_clean_build(self):
        assert is_clean_build(DictInputProvider(variables={"Build.Repository.Clean": "True"})) is True
        assert is_clean_build(DictInputProvider(variables={"Build.Repository.Clean": "false"})) is False
        assert is_clean_build(DictInputProvider()) is False


class TestGetBuildConfiguration:
    """Test resolving the full BuildConfiguration."""

    def test_defaults(self, make_inputs, temp_unity_project, unity_version):
        config = get_build_configuration(make_inputs(), host_platform="linux")

        assert config == BuildConfiguration(
            build_target=BuildTarget.WIN64,
            project_path=temp_unity_project,
            unity_version=unity_version,
        )
        assert config.output_file_name == "drop"
        assert config.development_build is False
        assert config.build_scenes == ()
        assert config.command_line_mode is CommandLineMode.DEFAULT

    def test_all_inputs(self, make_inputs):
        inputs = make_inputs(
            buildTarget="Android",
            outputFileName="MyGame",
            developmentBuild="true",
            buildScenes="Assets/A.unity,Assets/B.unity",
            commandLineArgumentsMode="custom",
        )

        config = get_build_configuration(inputs, host_platform="linux")

        assert config.build_target is BuildTarget.ANDROID
        assert config.output_file_name == "MyGame"
        assert config.development_build is True
        assert config.build_scenes == ("Assets/A.unity", "Assets/B.unity")
        assert config.command_line_mode is CommandLineMode.CUSTOM

    def test_configuration_is_immutable(self, make_inputs):
        config = get_build_configuration(make_inputs(), host_platform="linux")

        with pytest.raises(FrozenInstanceError):
            config.output_file_name = "other"

    def test_project_path_defaults_to_repository_root(self, temp_unity_project):
        inputs = DictInputProvider(
            {"buildTarget": "Win64"},
            {"Build.Repository.LocalPath": str(temp_unity_project)},
        )

        config = get_build_configuration(inputs, host_platform="linux")

        assert config.project_path == temp_unity_project

    def test_relative_project_path_is_made_absolute(self, make_inputs, repository_root, temp_unity_project, monkeypatch):
        monkeypatch.chdir(repository_root)

        config = get_build_configuration(make_inputs(unityProjectPath="TestProject"), host_platform="linux")

        assert config.project_path.is_absolute()
        assert config.project_path == temp_unity_project

    def test_missing_build_target(self, make_inputs):
        with pytest.raises(ConfigurationError) as exc_info:
            get_build_configuration(make_inputs(buildTarget=""), host_platform="linux")

        assert "buildTarget" in str(exc_info.value)

    def test_unknown_command_line_mode(self, make_inputs):
        with pytest.raises(ConfigurationError) as exc_info:
            get_build_configuration(make_inputs(commandLineArgumentsMode="weird"), host_platform="linux")

        assert "weird" in str(exc_info.value)

    def test_missing_project_version(self, make_inputs, tmp_path):
        with pytest.raises(IOError):
            get_build_configuration(make_inputs(unityProjectPath=str(tmp_path)), host_platform="linux")

    @pytest.mark.parametrize("host_platform", ["win32", "darwin", "linux"])
    def test_all_non_uwp_targets_resolve_on_any_host(self, make_inputs, host_platform):
        for target in BuildTarget:
            if target.requires_windows:
                continue
            config = get_build_configuration(make_inputs(buildTarget=target.value), host_platform)
            assert config.build_target is target

    @pytest.mark.parametrize("host_platform", ["darwin", "linux"])
    def test_uwp_fails_on_non_windows_host(self, make_inputs, host_platform):
        with pytest.raises(ConfigurationError) as exc_info:
            get_build_configuration(make_inputs(buildTarget="WindowsStoreApps"), host_platform)

        assert "UWP" in str(exc_info.value)

    def test_uwp_on_windows_host(self, make_inputs):
        config = get_build_configuration(make_inputs(buildTarget="WindowsStoreApps"), host_platform="win32")
        assert config.build_target is BuildTarget.WINDOWS_STORE_APPS
