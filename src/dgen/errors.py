# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exceptions raised by the fetch, render and write stages.
"""
from typing import Optional


class DockerGenError(Exception):
    """Base class for every error raised by dgen."""


class InvalidEndpoint(DockerGenError, ValueError):
    """The runtime endpoint address could not be parsed."""

    def __init__(self, address: str, reason: str = "Invalid bind address format"):
        self.address = address
        super().__init__(f"{reason}: {address}")


class RuntimeQueryError(DockerGenError):
    """Listing containers failed, or no runtime client could be created."""


class InspectionWarning(DockerGenError):
    """
    A single container could not be inspected.

    The fetcher records and logs these instead of raising them.
    """

    def __init__(self, container_id: str, cause: BaseException):
        self.container_id = container_id
        self.cause = cause
        super().__init__(f"error inspecting container: {container_id}: {cause}")


class MalformedInput(DockerGenError, ValueError):
    """Input data or a template helper argument has the wrong shape."""


class TypeMismatch(MalformedInput, TypeError):
    """A helper received a value of an unsupported kind."""


class InvalidArity(MalformedInput):
    """A helper received the wrong number of arguments."""


class KeyTypeError(MalformedInput, TypeError):
    """A mapping key was not a string."""


class IndexOutOfRange(MalformedInput, IndexError):
    """An element was requested from an empty sequence."""


class ConfigError(MalformedInput):
    """A configuration file could not be loaded."""


class TemplateParseError(DockerGenError):
    """The template could not be read or compiled."""

    def __init__(self, path: str, message: str, lineno: Optional[int] = None):
        self.path = path
        self.lineno = lineno
        location = f"{path}:{lineno}" if lineno else path
        super().__init__(f"unable to parse template {location}: {message}")


class TemplateRenderError(DockerGenError):
    """Rendering failed part-way; the output must be discarded."""

    def __init__(self, path: str, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"template error in {path}: {cause}")


class GenerationIOError(DockerGenError, OSError):
    """A filesystem step of the generation pass failed."""

    def __init__(self, action: str, path: str, cause: BaseException):
        self.action = action
        self.path = path
        self.cause = cause
        super().__init__(f"unable to {action} {path}: {cause}")
