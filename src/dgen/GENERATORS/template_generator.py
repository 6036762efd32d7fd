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
Rendering templates against running containers and writing the result.

A destination file is only ever replaced by a complete rendering: output
goes to a temporary file beside the destination, is compared with the
current contents and is renamed over the destination only if it differs.
"""
import contextlib
import logging
import os
import stat
import sys
import tempfile
from collections.abc import Mapping
from typing import Any, Iterator, List, Optional, Sequence, TextIO

from jinja2 import (
    Environment, FileSystemLoader, StrictUndefined, Template, TemplateError, TemplateNotFound, TemplateSyntaxError,
    Undefined,
)
from pydantic import BaseModel

from ..MODELS.generation_config import FilterMode, GenerationConfig
from ..MODELS.runtime_container import RuntimeContainer
from ..errors import GenerationIOError, TemplateParseError, TemplateRenderError
from .template_functions import build_function_library, model_field_name

logger = logging.getLogger(__name__)

TEMP_PREFIX = "dgen"
FILTERS = ("json", "jsonPretty", "sha1")


class ContainerEnvironment(Environment):
    """
    Environment that resolves model fields by attribute name or alias.

    ``c.ID`` and ``c.id`` are the same field. Unknown attributes are
    strictly undefined and fail the render, while a missing mapping key
    renders as the empty string (``c.Env.UNSET``).
    """

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, BaseModel):
            name = model_field_name(obj, attribute)
            if name is not None:
                return getattr(obj, name)
        return self._missing_key(obj, super().getattr(obj, attribute))

    def getitem(self, obj: Any, argument: Any) -> Any:
        if isinstance(obj, BaseModel) and isinstance(argument, str):
            name = model_field_name(obj, argument)
            if name is not None:
                return getattr(obj, name)
        return self._missing_key(obj, super().getitem(obj, argument))

    @staticmethod
    def _missing_key(obj: Any, value: Any) -> Any:
        if isinstance(value, Undefined) and isinstance(obj, Mapping):
            return ""
        return value


def create_environment(template_dir: str, environ: Optional[Mapping] = None) -> Environment:
    """
    Jinja2 environment with the helper library installed as globals.

    :param template_dir: Directory templates are loaded from.
    :param environ: Mapping read by hostEnviron.
    """
    env = ContainerEnvironment(
        loader=FileSystemLoader(template_dir),
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    functions = build_function_library(environ)
    env.globals.update(functions)
    for name in FILTERS:
        env.filters[name] = functions[name]
    return env


class TemplateGenerator:
    """
    Renders one template against a container collection.
    """

    def __init__(self, config: GenerationConfig, environ: Optional[Mapping] = None, stream: Optional[TextIO] = None):
        """
        Initializes the generator.

        :param config: The template and destination to render.
        :param environ: Mapping read by hostEnviron; defaults to os.environ.
        :param stream: Output used when the config has no destination.
        """
        self.config = config
        self.environ = environ
        self.stream = stream

    def load_template(self) -> Template:
        """
        Parses the configured template.

        :raises TemplateParseError: If the template is missing or invalid.
        """
        path = os.path.abspath(self.config.template)
        env = create_environment(os.path.dirname(path), self.environ)
        try:
            return env.get_template(os.path.basename(path))
        except TemplateNotFound:
            raise TemplateParseError(self.config.template, "template not found") from None
        except TemplateSyntaxError as e:
            raise TemplateParseError(self.config.template, e.message or str(e), e.lineno) from e
        except (TemplateError, OSError, UnicodeDecodeError) as e:
            raise TemplateParseError(self.config.template, str(e)) from e

    def filter_containers(self, containers: Sequence[RuntimeContainer]) -> List[RuntimeContainer]:
        """
        Applies the config's filter mode.

        :param containers: All running containers.
        :return: The containers the template is rendered against.
        """
        mode = self.config.filter_mode
        if mode == FilterMode.PUBLISHED:
            return [c for c in containers if c.published_addresses()]
        if mode == FilterMode.EXPOSED:
            return [c for c in containers if c.addresses]
        return list(containers)

    def generate(self, containers: Sequence[RuntimeContainer]) -> bool:
        """
        Renders the template and writes it out.

        Without a destination the output is streamed and the pass always
        reports a change. With one, the file is replaced only when the
        rendered bytes differ from its current contents.

        :param containers: All running containers.
        :return: True if output was written.
        :raises TemplateParseError: If the template cannot be compiled.
        :raises TemplateRenderError: If rendering fails.
        :raises GenerationIOError: If a filesystem step fails.
        """
        template = self.load_template()
        filtered = self.filter_containers(containers)

        if not self.config.dest:
            stream = self.stream or sys.stdout
            for chunk in self._render(template, filtered):
                stream.write(chunk)
            stream.flush()
            return True

        return self._write_dest(template, filtered)

    def _render(self, template: Template, containers: List[RuntimeContainer]) -> Iterator[str]:
        try:
            yield from template.generate(containers=containers)
        except Exception as e:
            raise TemplateRenderError(self.config.template, e) from e

    def _write_dest(self, template: Template, containers: List[RuntimeContainer]) -> bool:
        dest = self.config.dest
        # Same directory so the final rename never crosses filesystems
        dest_dir = os.path.dirname(os.path.abspath(dest))
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=dest_dir)
        except OSError as e:
            raise GenerationIOError("create temp file in", dest_dir, e) from e

        try:
            rendered = bytearray()
            with os.fdopen(fd, "wb") as tmp:
                for chunk in self._render(template, containers):
                    data = chunk.encode("utf-8")
                    try:
                        tmp.write(data)
                    except OSError as e:
                        raise GenerationIOError("write temp file", tmp_path, e) from e
                    rendered += data

            current = self._adopt_existing(dest, tmp_path)
            if current == bytes(rendered):
                logger.debug("'%s' is unchanged", dest)
                return False

            try:
                os.replace(tmp_path, dest)
            except OSError as e:
                raise GenerationIOError("create dest file", dest, e) from e
            logger.info("Generated '%s' from %d containers", dest, len(containers))
            return True
        finally:
            with contextlib.suppress(FileNotFoundError):
                os.remove(tmp_path)

    def _adopt_existing(self, dest: str, tmp_path: str) -> bytes:
        """
        Copies mode and ownership of an existing destination onto the
        temporary file and returns the destination's current bytes.
        """
        try:
            st = os.stat(dest)
        except FileNotFoundError:
            return b""
        except OSError as e:
            raise GenerationIOError("stat", dest, e) from e

        try:
            os.chmod(tmp_path, stat.S_IMODE(st.st_mode))
        except OSError as e:
            raise GenerationIOError("chmod temp file", tmp_path, e) from e
        try:
            os.chown(tmp_path, st.st_uid, st.st_gid)
        except OSError as e:
            raise GenerationIOError("chown temp file", tmp_path, e) from e

        try:
            with open(dest, "rb") as f:
                return f.read()
        except OSError as e:
            raise GenerationIOError("compare current file contents of", dest, e) from e


def generate_file(
    config: GenerationConfig,
    containers: Sequence[RuntimeContainer],
    environ: Optional[Mapping] = None,
    stream: Optional[TextIO] = None,
) -> bool:
    """
    Runs one generation pass for ``config``.

    :return: True if the destination changed (always True for stdout).
    """
    return TemplateGenerator(config, environ=environ, stream=stream).generate(containers)
