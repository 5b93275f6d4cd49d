"""
Shared pytest configuration and fixtures for unity-build-tools tests.
"""

import pytest
import sys
import stat
from pathlib import Path

# Add skill lib directory to Python path
PLUGIN_ROOT = Path(__file__).parent.parent
SKILLS_ROOT = PLUGIN_ROOT / "skills"

# unity-build library
UNITY_BUILD_LIB = SKILLS_ROOT / "unity-build" / "lib"
if str(UNITY_BUILD_LIB) not in sys.path:
    sys.path.insert(0, str(UNITY_BUILD_LIB))

UNITY_VERSION = "2021.3.1f1"


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "e2e: End-to-end tests requiring a real Unity editor")
    config.addinivalue_line("markers", "slow: Slow tests")
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection based on markers and options."""
    # If not running E2E tests, skip them by default
    if not config.getoption("--run-e2e", default=False):
        skip_e2e = pytest.mark.skip(reason="E2E tests disabled (use --run-e2e to enable)")
        for item in items:
            if "e2e" in item.keywords:
                item.add_marker(skip_e2e)

    # Skip slow tests unless explicitly requested
    if not config.getoption("--run-slow", default=False):
        skip_slow = pytest.mark.skip(reason="Slow tests disabled (use --run-slow to enable)")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run end-to-end tests that require a real Unity editor"
    )
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests"
    )


# ============================================================================
# Shared Fixtures
# ============================================================================

@pytest.fixture
def unity_version():
    return UNITY_VERSION


@pytest.fixture
def temp_unity_project(tmp_path):
    """
    Create a temporary minimal Unity project structure.

    Returns:
        Path to the temporary project directory (inside tmp_path/repo)
    """
    project_dir = tmp_path / "repo" / "TestProject"
    settings_dir = project_dir / "ProjectSettings"
    settings_dir.mkdir(parents=True)

    (settings_dir / "ProjectVersion.txt").write_text(
        f"m_EditorVersion: {UNITY_VERSION}\n"
        f"m_EditorVersionWithRevision: {UNITY_VERSION} (3b70a0754835)\n",
        encoding='utf-8'
    )
    (project_dir / "Assets").mkdir()

    return project_dir


@pytest.fixture
def repository_root(temp_unity_project):
    """Repository checkout containing the temporary project."""
    return temp_unity_project.parent


@pytest.fixture
def fake_editors_root(tmp_path):
    """
    Create an editors root with a fake Linux Unity editor for UNITY_VERSION.

    The fake editor is a shell script that writes a file into the project's
    Builds/<target> folder and exits 0, mimicking a successful build.

    Returns:
        Path to the editors root
    """
    editors_root = tmp_path / "editors"
    editor_dir = editors_root / UNITY_VERSION / "Editor"
    editor_dir.mkdir(parents=True)

    executable = editor_dir / "Unity"
    executable.write_text(
        "#!/bin/sh\n"
        "while [ $# -gt 0 ]; do\n"
        "  case \"$1\" in\n"
        "    -buildTarget) target=\"$2\"; shift ;;\n"
        "    -projectPath) project=\"$2\"; shift ;;\n"
        "  esac\n"
        "  shift\n"
        "done\n"
        "echo built > \"$project/Builds/$target/player\"\n"
        "exit 0\n",
        encoding='utf-8'
    )
    executable.chmod(executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    return editors_root


@pytest.fixture
def make_inputs(temp_unity_project, repository_root, fake_editors_root):
    """
    Factory for DictInputProvider instances with a working default setup.

    Keyword arguments override task inputs; 'variables' and 'environ'
    override pipeline and environment variables.
    """
    from unity_build.pipeline import DictInputProvider

    def _make(variables=None, environ=None, **inputs):
        task_inputs = {
            "buildTarget": "Win64",
            "unityProjectPath": str(temp_unity_project),
            "unityEditorsPathMode": "specify",
            "customUnityEditorsPath": str(fake_editors_root),
            "commandLineArgumentsMode": "default",
        }
        task_inputs.update(inputs)

        pipeline_variables = {"Build.Repository.LocalPath": str(repository_root)}
        pipeline_variables.update(variables or {})

        return DictInputProvider(task_inputs, pipeline_variables, environ or {})

    return _make
