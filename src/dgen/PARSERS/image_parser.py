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
Image reference parsing.
Splits strings like 'nginx:latest' or 'quay.io/coreos/etcd:v3' as the runtime reports them.
"""
from ..MODELS.runtime_container import ImageReference


class ImageParser:
    """
    Best-effort parser for the image string of an inspected container.
    """

    @staticmethod
    def parse(reference: str) -> ImageReference:
        """
        Split an image reference into registry, repository and tag.

        The split is purely lexical: the registry is whatever precedes the
        first '/', the tag whatever follows the first ':' after it. Nothing
        is validated, so 'localhost:5000/app' is read as registry
        'localhost:5000' and repository 'app', while 'app:1/x' yields a
        tag of '1/x'.

        Args:
            reference: Image string (e.g., 'nginx', 'myuser/myimage:v1')

        Returns:
            Parsed ImageReference; missing parts are empty strings.
        """
        registry = ""
        repository = reference
        if "/" in reference:
            registry, repository = reference.split("/", 1)

        tag = ""
        if ":" in repository:
            repository, tag = repository.split(":", 1)

        return ImageReference(registry=registry, repository=repository, tag=tag)
