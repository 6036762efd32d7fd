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
Builders for converting raw container inspection data into RuntimeContainer models.
"""
from typing import Any, Dict, List
from ..PARSERS.image_parser import ImageParser
from ..PARSERS.env_parser import EnvParser
from ..MODELS.runtime_container import Address, RuntimeContainer, Volume


class ContainerBuilder:
    """
    Normalizes the output of the runtime's inspect call (the Docker Engine
    API ``GET /containers/{id}/json`` document) into a RuntimeContainer.
    """
    def __init__(self):
        self.image_parser = ImageParser()
        self.env_parser = EnvParser()

    def build(self, raw: Dict[str, Any]) -> RuntimeContainer:
        """
        Creates a RuntimeContainer from one inspection record.

        :param raw: The decoded inspect response.
        :return: A RuntimeContainer instance.
        :raises MalformedInput: If an environment entry has no '='.
        """
        container_id = raw.get("Id") or raw.get("ID") or ""
        config = raw.get("Config") or {}
        network = raw.get("NetworkSettings") or {}

        return RuntimeContainer(
            id=container_id,
            image=self.image_parser.parse(config.get("Image") or ""),
            name=self._strip_name(raw.get("Name") or ""),
            hostname=config.get("Hostname") or "",
            gateway=network.get("Gateway") or "",
            addresses=self._build_addresses(network),
            env=self.env_parser.parse_entries(config.get("Env"), container_id),
            volumes=self._build_volumes(raw),
        )

    @staticmethod
    def _strip_name(name: str) -> str:
        # Runtime names carry a single leading '/'
        if name.startswith("/"):
            return name[1:]
        return name

    def _build_addresses(self, network: Dict[str, Any]) -> List[Address]:
        """
        One address per declared container port; the first host binding, if
        any, provides the host port. A container with no declared ports gets
        a single address carrying only its IP.
        """
        ip = network.get("IPAddress") or ""
        addresses = []
        for key, bindings in (network.get("Ports") or {}).items():
            port, _, proto = key.partition("/")
            host_port = ""
            if bindings:
                host_port = bindings[0].get("HostPort") or ""
            addresses.append(Address(ip=ip, port=port, proto=proto or "tcp", host_port=host_port))

        if not addresses:
            addresses.append(Address(ip=ip))
        return addresses

    def _build_volumes(self, raw: Dict[str, Any]) -> Dict[str, Volume]:
        """
        Volumes from the legacy ``Volumes``/``VolumesRW`` maps, or from
        ``Mounts`` on engines that no longer report them.
        """
        volumes = {}
        legacy = raw.get("Volumes")
        if legacy is not None:
            read_write = raw.get("VolumesRW") or {}
            for path, host_path in legacy.items():
                volumes[path] = Volume(
                    path=path,
                    host_path=host_path or "",
                    read_write=bool(read_write.get(path, False)),
                )
            return volumes

        for mount in raw.get("Mounts") or []:
            path = mount.get("Destination")
            if not path:
                continue
            volumes[path] = Volume(
                path=path,
                host_path=mount.get("Source") or "",
                read_write=bool(mount.get("RW", False)),
            )
        return volumes
