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
Fetching the set of running containers from the runtime.
"""
import logging
from typing import Any, Dict, List, Optional, Protocol

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..BUILDERS.container_builder import ContainerBuilder
from ..MODELS.runtime_container import RuntimeContainer
from ..errors import InspectionWarning, RuntimeQueryError

logger = logging.getLogger(__name__)


class RuntimeClient(Protocol):
    """The subset of docker.APIClient the fetcher relies on."""

    def containers(self) -> List[Dict[str, Any]]: ...

    def inspect_container(self, container: str) -> Dict[str, Any]: ...


class ContainerFetcher:
    """
    Lists and inspects running containers, producing RuntimeContainer models.
    """

    def __init__(
        self,
        client: RuntimeClient,
        builder: Optional[ContainerBuilder] = None,
        list_attempts: int = 3,
        retry_wait=None,
    ):
        """
        Initializes the fetcher.

        :param client: Runtime client to query.
        :param builder: Builder for inspection records.
        :param list_attempts: Attempts made at listing before giving up.
        :param retry_wait: tenacity wait strategy between listing attempts.
        """
        self.client = client
        self.builder = builder or ContainerBuilder()
        self.list_attempts = list_attempts
        self.retry_wait = retry_wait or wait_exponential(multiplier=0.2, max=2)
        self.warnings: List[InspectionWarning] = []

    def fetch(self) -> List[RuntimeContainer]:
        """
        Returns every running container, in listing order.

        A container that cannot be inspected (for example because it was
        removed after the listing) is skipped and recorded in ``warnings``.

        :return: The normalized containers.
        :raises RuntimeQueryError: If the running containers cannot be listed.
        """
        self.warnings = []
        listed = self._list_containers()

        containers = []
        for entry in listed:
            container_id = entry.get("Id", "")
            try:
                raw = self.client.inspect_container(container_id)
            except Exception as e:
                warning = InspectionWarning(container_id, e)
                logger.warning("%s", warning)
                self.warnings.append(warning)
                continue
            containers.append(self.builder.build(raw))

        logger.debug("Fetched %d of %d running containers", len(containers), len(listed))
        return containers

    def _list_containers(self) -> List[Dict[str, Any]]:
        # Connection failures surface as OSError subclasses
        retrying = Retrying(
            stop=stop_after_attempt(self.list_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        try:
            return retrying(self.client.containers)
        except Exception as e:
            raise RuntimeQueryError(f"error listing containers: {e}") from e
