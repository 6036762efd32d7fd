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
Construction of the Docker Engine API client used to query running containers.
"""
import logging
import os
from typing import Optional

import docker
from docker.errors import DockerException

from ..PARSERS.endpoint_parser import EndpointParser
from ..errors import RuntimeQueryError

logger = logging.getLogger(__name__)


def resolve_base_url(endpoint: Optional[str] = None) -> str:
    """
    Turn an endpoint string into a base URL the Docker SDK accepts.

    Args:
        endpoint: Endpoint string; falls back to $DOCKER_HOST, then the local socket.

    Returns:
        'unix:///path' or 'tcp://host:port'.

    Raises:
        InvalidEndpoint: If the endpoint is malformed.
        RuntimeQueryError: For 'fd://' endpoints, which the SDK cannot dial.
    """
    if endpoint is None:
        endpoint = os.environ.get("DOCKER_HOST", "")
    proto, address = EndpointParser.parse(endpoint)
    if proto == "fd":
        raise RuntimeQueryError(f"fd:// endpoints are not supported: {address}")
    if proto == "unix":
        return f"unix://{address}"
    return f"tcp://{address}"


def create_client(endpoint: Optional[str] = None) -> docker.APIClient:
    """
    Create a low-level Docker API client for the given endpoint.

    Args:
        endpoint: Endpoint string, see resolve_base_url().

    Returns:
        A client exposing containers() and inspect_container().
    """
    base_url = resolve_base_url(endpoint)
    logger.debug("Connecting to runtime at %s", base_url)
    try:
        return docker.APIClient(base_url=base_url, version="auto")
    except DockerException as e:
        raise RuntimeQueryError(f"unable to create client for {base_url}: {e}") from e
