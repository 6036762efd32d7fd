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
Parsers for dgen YAML configuration files.
"""
import yaml
from pydantic import ValidationError
from ..MODELS.generation_config import GeneratorSettings
from ..errors import ConfigError


class ConfigParser:
    """
    Parser for dgen.yml files.

    Example::

        endpoint: unix:///var/run/docker.sock
        configs:
          - template: /etc/dgen/nginx.tmpl
            dest: /etc/nginx/conf.d/default.conf
            only_exposed: true
    """

    def parse(self, config_path: str) -> GeneratorSettings:
        """
        Parses a configuration file from a path.

        :param config_path: Path to the configuration file.
        :return: Parsed settings.
        :raises ConfigError: If the file cannot be read or is invalid.
        """
        try:
            with open(config_path, 'r') as f:
                content = f.read()
        except OSError as e:
            raise ConfigError(f"unable to read config {config_path}: {e}") from e
        return self.parse_from_string(content, source=config_path)

    def parse_from_string(self, content: str, source: str = "<string>") -> GeneratorSettings:
        """
        Parses a configuration from a string.

        :param content: YAML content of the configuration.
        :param source: Name reported in error messages.
        :return: Parsed settings.
        :raises ConfigError: On invalid YAML or an invalid schema.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML in {source}: {e}") from e

        if not data:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"invalid config in {source}: expected a mapping at the top level")

        try:
            return GeneratorSettings.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"invalid config in {source}: {e}") from e
