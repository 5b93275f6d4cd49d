#!/usr/bin/env python3
"""
Unity Build Task - Pipeline Inputs and Reporting

Input providers hide where task inputs, pipeline variables and environment
variables come from, so the build logic never reads os.environ directly:

- EnvironmentInputProvider reads them the way an Azure Pipelines agent
  exposes them to a task (INPUT_<NAME> and normalized variable names).
- DictInputProvider holds them in memory (CLI overrides, tests).

PipelineReporter writes ##vso logging commands back to the agent.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, Mapping, Optional, TextIO

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _normalize_name(name: str) -> str:
    """Build.Repository.LocalPath -> BUILD_REPOSITORY_LOCALPATH"""
    return name.replace(".", "_").replace(" ", "_").upper()


class InputProvider:
    """
    Base class for task configuration sources.

    Subclasses implement _read_input(), _read_variable() and _read_env();
    the typed accessors below are shared.
    """

    def _read_input(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def _read_variable(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def _read_env(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def get_input(self, name: str, required: bool = False) -> Optional[str]:
        """
        Get a task input, trimmed.

        Args:
            name: Input name as declared by the task (e.g. 'buildTarget')
            required: Raise if the input is missing or empty

        Returns:
            Input value, or None when not set
        """
        value = self._read_input(name)
        if value is not None:
            value = value.strip()

        if not value:
            if required:
                raise ConfigurationError(f"Input required: {name}")
            return None

        return value

    def get_bool_input(self, name: str, required: bool = False) -> bool:
        value = self.get_input(name, required)
        return (value or "").lower() == "true"

    def get_path_input(self, name: str, required: bool = False) -> Optional[Path]:
        value = self.get_input(name, required)
        return Path(value) if value else None

    def get_variable(self, name: str) -> Optional[str]:
        value = self._read_variable(name)
        if value is not None:
            value = value.strip()
        return value or None

    def get_env(self, name: str) -> Optional[str]:
        return self._read_env(name) or None


class EnvironmentInputProvider(InputProvider):
    """Reads inputs and variables from the agent-provided environment."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def _read_input(self, name: str) -> Optional[str]:
        return self.environ.get(f"INPUT_{_normalize_name(name)}")

    def _read_variable(self, name: str) -> Optional[str]:
        return self.environ.get(_normalize_name(name))

    def _read_env(self, name: str) -> Optional[str]:
        return self.environ.get(name)


class DictInputProvider(InputProvider):
    """
    In-memory provider.

    Args:
        inputs: Task inputs keyed by input name
        variables: Pipeline variables keyed by variable name
        environ: Environment variables
        fallback: Provider consulted for anything not set here
    """

    def __init__(self,
                 inputs: Optional[Mapping[str, str]] = None,
                 variables: Optional[Mapping[str, str]] = None,
                 environ: Optional[Mapping[str, str]] = None,
                 fallback: Optional[InputProvider] = None):
        self.inputs = dict(inputs or {})
        self.variables = dict(variables or {})
        self.environ = dict(environ or {})
        self.fallback = fallback

    def _read_input(self, name: str) -> Optional[str]:
        if name in self.inputs:
            return self.inputs[name]
        if self.fallback:
            return self.fallback._read_input(name)
        return None

    def _read_variable(self, name: str) -> Optional[str]:
        if name in self.variables:
            return self.variables[name]
        if self.fallback:
            return self.fallback._read_variable(name)
        return None

    def _read_env(self, name: str) -> Optional[str]:
        if name in self.environ:
            return self.environ[name]
        if self.fallback:
            return self.fallback._read_env(name)
        return None


class TaskResult:
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


def _escape_property(value: str) -> str:
    return (value.replace("%", "%AZP25")
                 .replace("\r", "%0D")
                 .replace("\n", "%0A")
                 .replace("]", "%5D")
                 .replace(";", "%3B"))


def _escape_data(value: str) -> str:
    return (value.replace("%", "%AZP25")
                 .replace("\r", "%0D")
                 .replace("\n", "%0A"))


class PipelineReporter:
    """
    Emits pipeline logging commands and keeps a copy of what was reported.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream
        self.variables: Dict[str, str] = {}
        self.result: Optional[str] = None
        self.message: Optional[str] = None

    def _write(self, command: str, properties: Dict[str, str], data: str):
        props = ";".join(f"{k}={_escape_property(v)}" for k, v in properties.items())
        line = f"##vso[{command} {props};]{_escape_data(data)}" if props \
            else f"##vso[{command}]{_escape_data(data)}"
        stream = self.stream if self.stream is not None else sys.stdout
        print(line, file=stream, flush=True)

    def set_variable(self, name: str, value: str):
        """Publish a variable for later pipeline steps."""
        self.variables[name] = value
        logger.debug(f"Set variable {name}={value}")
        self._write("task.setvariable", {"variable": name}, value)

    def set_result(self, result: str, message: str):
        """Report the terminal task result."""
        self.result = result
        self.message = message
        self._write("task.complete", {"result": result}, message)
