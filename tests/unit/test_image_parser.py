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
Unit tests for image reference parsing.
"""
import pytest
from dgen.PARSERS.image_parser import ImageParser


class TestImageParser:
    """Tests for ImageParser.parse."""

    def test_parse_simple_name(self):
        """Test parsing a bare repository."""
        ref = ImageParser.parse("nginx")
        assert ref.registry == ""
        assert ref.repository == "nginx"
        assert ref.tag == ""

    def test_parse_with_tag(self):
        """Test parsing image with tag."""
        ref = ImageParser.parse("nginx:1.21")
        assert ref.registry == ""
        assert ref.repository == "nginx"
        assert ref.tag == "1.21"

    def test_parse_full_reference(self):
        """Test parsing registry/repository:tag."""
        ref = ImageParser.parse("quay.io/etcd:v3.5")
        assert ref.registry == "quay.io"
        assert ref.repository == "etcd"
        assert ref.tag == "v3.5"

    def test_first_slash_is_registry(self):
        """Everything before the first '/' is the registry, even for a user namespace."""
        ref = ImageParser.parse("myuser/myimage:v1")
        assert ref.registry == "myuser"
        assert ref.repository == "myimage"
        assert ref.tag == "v1"

    def test_nested_repository(self):
        """Later slashes stay in the repository."""
        ref = ImageParser.parse("gcr.io/project/image")
        assert ref.registry == "gcr.io"
        assert ref.repository == "project/image"
        assert ref.tag == ""

    def test_registry_port_is_not_a_tag(self):
        """A ':' before the first '/' belongs to the registry."""
        ref = ImageParser.parse("localhost:5000/myimage:v1")
        assert ref.registry == "localhost:5000"
        assert ref.repository == "myimage"
        assert ref.tag == "v1"

    def test_malformed_input_is_not_detected(self):
        """Splitting is lexical; a tag may contain anything."""
        ref = ImageParser.parse("app:1/x")
        assert ref.registry == "app:1"
        assert ref.repository == "x"

    def test_empty_reference(self):
        """An empty string parses to empty parts."""
        ref = ImageParser.parse("")
        assert (ref.registry, ref.repository, ref.tag) == ("", "", "")

    @pytest.mark.parametrize("registry,repository,tag", [
        ("docker.io", "nginx", "latest"),
        ("registry.local:5000", "team-app", "2024.01"),
        ("r", "repo", "tag"),
    ])
    def test_components_round_trip(self, registry, repository, tag):
        """Reassembling the parts recovers the original string."""
        reference = f"{registry}/{repository}:{tag}"
        ref = ImageParser.parse(reference)
        assert (ref.registry, ref.repository, ref.tag) == (registry, repository, tag)
        assert f"{ref.registry}/{ref.repository}:{ref.tag}" == reference
        assert str(ref) == reference

    def test_str_omits_missing_parts(self):
        """Test string representation without registry or tag."""
        assert str(ImageParser.parse("nginx")) == "nginx"
        assert str(ImageParser.parse("nginx:1.21")) == "nginx:1.21"
