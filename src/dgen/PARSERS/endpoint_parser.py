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
Parsing of container runtime endpoint addresses such as
'unix:///var/run/docker.sock' or 'tcp://10.0.0.1:2375'.
"""
from typing import Tuple

from ..errors import InvalidEndpoint

DEFAULT_UNIX_SOCKET = "/var/run/docker.sock"
DEFAULT_TCP_HOST = "127.0.0.1"


class EndpointParser:
    """
    Resolves an endpoint string into a (protocol, address) pair.
    """

    @staticmethod
    def parse(addr: str) -> Tuple[str, str]:
        """
        Parse a runtime endpoint.

        Recognized forms are 'unix://path', 'tcp://host:port', 'fd://...'
        and a bare 'host:port'. An empty string selects the local socket.

        Args:
            addr: Endpoint string.

        Returns:
            (protocol, address) where address is a socket path for 'unix'
            and 'host:port' for 'tcp'.

        Raises:
            InvalidEndpoint: On an unknown scheme, a missing or zero port,
                a non-numeric port or too many ':' separators.
        """
        original = addr
        addr = (addr or "").strip()

        if addr == "tcp://":
            raise InvalidEndpoint(original)
        if addr.startswith("unix://"):
            return "unix", addr[len("unix://"):] or DEFAULT_UNIX_SOCKET
        if addr.startswith("fd://"):
            return "fd", addr
        if addr == "":
            return "unix", DEFAULT_UNIX_SOCKET

        if addr.startswith("tcp://"):
            addr = addr[len("tcp://"):]
        elif "://" in addr:
            raise InvalidEndpoint(original, "Invalid bind address protocol")

        if ":" not in addr:
            raise InvalidEndpoint(original)

        parts = addr.split(":")
        if len(parts) != 2:
            raise InvalidEndpoint(original)

        host = parts[0] or DEFAULT_TCP_HOST
        if not (parts[1].isascii() and parts[1].isdigit()):
            raise InvalidEndpoint(original)
        port = int(parts[1])
        if port == 0:
            raise InvalidEndpoint(original)

        return "tcp", f"{host}:{port}"
