#!/usr/bin/env python3
"""
Unity Build Task - Build Output Directory
"""

import logging
import os
import shutil
from pathlib import Path

from .config import BuildConfiguration
from .editor import check_path

logger = logging.getLogger(__name__)


def build_output_path(config: BuildConfiguration) -> Path:
    """Folder the player is built into, e.g. <project>/Builds/Win64."""
    return Path(config.project_path) / config.build_target.output_directory


def prepare_output_directory(config: BuildConfiguration, clean: bool = False) -> Path:
    """
    Create the build output directory, removing it first for clean builds.

    Args:
        config: Build configuration
        clean: Remove any existing output directory first

    Returns:
        Path to the output directory

    Raises:
        IOError: if the directory does not exist afterwards
    """
    output_path = build_output_path(config)

    if clean and output_path.exists():
        logger.info(f"Clean build: removing {output_path}")
        shutil.rmtree(output_path)

    output_path.mkdir(parents=True, exist_ok=True)
    check_path(output_path, "Build Output Directory")

    logger.info(f"Build output directory: {output_path}")
    return output_path


def repository_relative(path: Path, repository_root: Path) -> str:
    """Path relative to the repository root, with forward slashes."""
    return Path(os.path.relpath(path, repository_root)).as_posix()
