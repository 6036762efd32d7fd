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
Models for running containers as seen by templates.

Field names are snake_case in Python; each field also carries the alias
templates and JSON output use (``ID``, ``Env``, ``Addresses`` ...).
"""
from typing import Dict, List
from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ImageReference(_Frozen):
    """
    Lexical split of an image string into registry, repository and tag.

    Examples:
        - nginx -> ('', 'nginx', '')
        - nginx:1.21 -> ('', 'nginx', '1.21')
        - quay.io/coreos/etcd:v3 -> ('quay.io', 'coreos/etcd', 'v3')
    """

    registry: str = Field(default="", alias="Registry")
    repository: str = Field(default="", alias="Repository")
    tag: str = Field(default="", alias="Tag")

    def __str__(self) -> str:
        name = self.repository
        if self.registry:
            name = f"{self.registry}/{name}"
        if self.tag:
            name = f"{name}:{self.tag}"
        return name


class Address(_Frozen):
    """
    A container port and, when published, the host port it is bound to.
    """

    ip: str = Field(default="", alias="IP")
    port: str = Field(default="", alias="Port")
    proto: str = Field(default="", alias="Proto")
    host_port: str = Field(default="", alias="HostPort")


class Volume(_Frozen):
    """
    A volume mounted into a container.
    """

    path: str = Field(alias="Path")
    host_path: str = Field(default="", alias="HostPath")
    read_write: bool = Field(default=False, alias="ReadWrite")


class RuntimeContainer(_Frozen):
    """
    The normalized, template-facing record of one running container.
    """

    id: str = Field(alias="ID")
    image: ImageReference = Field(default_factory=ImageReference, alias="Image")
    name: str = Field(default="", alias="Name")
    hostname: str = Field(default="", alias="Hostname")
    gateway: str = Field(default="", alias="Gateway")
    addresses: List[Address] = Field(default_factory=list, alias="Addresses")
    env: Dict[str, str] = Field(default_factory=dict, alias="Env")
    volumes: Dict[str, Volume] = Field(default_factory=dict, alias="Volumes")

    def published_addresses(self) -> List[Address]:
        """Addresses bound to a port on the host."""
        return [address for address in self.addresses if address.host_port]
