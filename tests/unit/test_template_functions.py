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
Unit tests for the template helper library.
"""
import json
import pytest
from dgen.GENERATORS import template_functions as fn
from dgen.MODELS.runtime_container import Address, RuntimeContainer
from dgen.errors import IndexOutOfRange, InvalidArity, KeyTypeError, MalformedInput, TypeMismatch


def container(container_id, **env):
    return RuntimeContainer(id=container_id, env=env, addresses=[Address(ip="10.0.0.1")])


@pytest.fixture
def virtual_hosts():
    return [
        container("1", VIRTUAL_HOST="demo1.localhost"),
        container("2", VIRTUAL_HOST="demo1.localhost"),
        container("3", VIRTUAL_HOST="demo2.localhost"),
    ]


class TestDeepGet:
    """Tests for dotted path lookup."""

    def test_alias_and_field_name(self, virtual_hosts):
        assert fn.deep_get(virtual_hosts[0], "Env.VIRTUAL_HOST") == "demo1.localhost"
        assert fn.deep_get(virtual_hosts[0], "env.VIRTUAL_HOST") == "demo1.localhost"
        assert fn.deep_get(virtual_hosts[0], "ID") == "1"

    def test_nested_model(self):
        c = RuntimeContainer(id="x", image={"registry": "r", "repository": "app", "tag": "v1"})
        assert fn.deep_get(c, "Image.Tag") == "v1"

    def test_missing(self, virtual_hosts):
        assert fn.deep_get(virtual_hosts[0], "Env.MISSING") is None
        assert fn.deep_get(virtual_hosts[0], "Nope.Deeper") is None
        assert fn.deep_get(virtual_hosts[0], "ID.Deeper") is None


class TestGrouping:
    """Tests for groupBy, groupByMulti and groupByKeys."""

    def test_group_by(self, virtual_hosts):
        groups = fn.group_by(virtual_hosts, "Env.VIRTUAL_HOST")
        assert len(groups) == 2
        assert len(groups["demo1.localhost"]) == 2
        assert len(groups["demo2.localhost"]) == 1
        assert groups["demo2.localhost"][0].id == "3"

    def test_group_by_skips_missing(self, virtual_hosts):
        groups = fn.group_by(virtual_hosts + [container("4")], "Env.VIRTUAL_HOST")
        assert sum(len(members) for members in groups.values()) == 3

    def test_group_by_skips_non_strings(self, virtual_hosts):
        assert fn.group_by(virtual_hosts, "Addresses") == {}

    def test_group_by_multi(self):
        containers = [
            container("1", VIRTUAL_HOST="demo1.localhost"),
            container("2", VIRTUAL_HOST="demo1.localhost,demo3.localhost"),
            container("3", VIRTUAL_HOST="demo2.localhost"),
        ]
        groups = fn.group_by_multi(containers, "Env.VIRTUAL_HOST", ",")
        assert len(groups) == 3
        assert len(groups["demo1.localhost"]) == 2
        assert [c.id for c in groups["demo3.localhost"]] == ["2"]
        assert [c.id for c in groups["demo2.localhost"]] == ["3"]

    def test_group_by_keys_first_occurrence_order(self):
        containers = [
            container("1", VIRTUAL_HOST="b.localhost"),
            container("2", VIRTUAL_HOST="a.localhost"),
            container("3", VIRTUAL_HOST="b.localhost"),
        ]
        assert fn.group_by_keys(containers, "Env.VIRTUAL_HOST") == ["b.localhost", "a.localhost"]


class TestMappingHelpers:
    """Tests for contains, keys and dict."""

    def test_contains(self):
        env = {"PORT": "1234"}
        assert fn.contains(env, "PORT")
        assert not fn.contains(env, "MISSING")
        assert not fn.contains(None, "PORT")

    def test_keys(self):
        assert fn.keys({"VIRTUAL_HOST": "demo.local"}) == ["VIRTUAL_HOST"]

    def test_keys_empty(self):
        assert fn.keys({}) == []

    def test_keys_nil(self):
        assert fn.keys(None) is None

    def test_keys_non_map(self):
        with pytest.raises(TypeMismatch):
            fn.keys(["a", "b"])
        with pytest.raises(MalformedInput):
            fn.keys(5)

    def test_dict(self, virtual_hosts):
        d = fn.make_dict("/", virtual_hosts, "count", 3)
        assert d["/"] is virtual_hosts
        assert d["count"] == 3
        assert "MISSING" not in d

    def test_dict_odd_arity(self):
        with pytest.raises(InvalidArity):
            fn.make_dict("a")

    def test_dict_key_type(self):
        with pytest.raises(KeyTypeError):
            fn.make_dict(1, 2)


class TestStringHelpers:
    """Tests for prefix, suffix, head and tail helpers."""

    def test_has_prefix(self):
        assert fn.has_prefix("tcp://", "tcp://127.0.0.1:2375")
        assert not fn.has_prefix("unix://", "tcp://127.0.0.1:2375")

    def test_has_suffix(self):
        assert fn.has_suffix(".local", "myhost.local")

    def test_trim_prefix(self):
        assert fn.trim_prefix("tcp://", "tcp://127.0.0.1:2375") == "127.0.0.1:2375"
        assert fn.trim_prefix("udp://", "tcp://x") == "tcp://x"

    def test_trim_suffix(self):
        assert fn.trim_suffix(".local", "myhost.local") == "myhost"
        assert fn.trim_suffix("", "myhost") == "myhost"

    def test_string_head(self):
        assert fn.string_head("tcp://127.0.0.1:2375", len("tcp://")) == "tcp://"
        assert fn.string_head("abc", 10) == "abc"

    def test_string_tail(self):
        assert fn.string_tail("catscatscatsinhats", 4) == "hats"
        assert fn.string_tail("abc", 3) == ""
        assert fn.string_tail("abc", 10) == ""

    def test_negative_length(self):
        with pytest.raises(MalformedInput):
            fn.string_head("abc", -1)
        with pytest.raises(MalformedInput):
            fn.string_tail("abc", -1)

    def test_split_and_replace(self):
        assert fn.split("a,b,c", ",") == ["a", "b", "c"]
        assert fn.replace("a.b.c", ".", "-", 1) == "a-b.c"
        assert fn.replace("a.b.c", ".", "-", -1) == "a-b-c"


class TestSequenceHelpers:
    """Tests for closest, first, last and coalesce."""

    def test_closest(self):
        assert fn.array_closest(["foo.bar.com", "bar.com"], "foo.bar.com") == "foo.bar.com"
        assert fn.array_closest(["foo.fo.com", "bar.com"], "foo.bar.com") == "bar.com"
        assert fn.array_closest(["foo.fo.com", "bip.com"], "foo.bar.com") == ""

    def test_closest_tie_keeps_first(self):
        assert fn.array_closest(["ab", "bc"], "abc") == "ab"

    def test_first(self):
        assert fn.array_first(["a", "b"]) == "a"
        assert fn.array_first([]) is None
        assert fn.array_first(None) is None

    def test_last(self):
        assert fn.array_last(["a", "b"]) == "b"

    def test_last_empty(self):
        with pytest.raises(IndexOutOfRange):
            fn.array_last([])

    def test_coalesce(self):
        assert fn.coalesce(None, "", "x") == ""
        assert fn.coalesce(None, None) is None


class TestEncodingHelpers:
    """Tests for json, jsonPretty and sha1."""

    def test_sha1(self):
        assert fn.hash_sha1("/path") == "4f26609ad3f5185faaa9edf1e93aa131e2131352"

    def test_json(self, virtual_hosts):
        output = fn.marshal_json(virtual_hosts)
        decoded = json.loads(output)
        assert len(decoded) == len(virtual_hosts)
        assert [c["ID"] for c in decoded] == ["1", "2", "3"]
        assert decoded[0]["Env"]["VIRTUAL_HOST"] == "demo1.localhost"
        assert decoded[0]["Addresses"][0]["IP"] == "10.0.0.1"
        assert not output.endswith("\n")
        assert " " not in fn.marshal_json({"a": [1, 2]})

    def test_json_pretty(self, virtual_hosts):
        output = fn.marshal_json_pretty(virtual_hosts)
        decoded = json.loads(output)
        assert [c["ID"] for c in decoded] == ["1", "2", "3"]
        assert output.startswith("[\n    {")
        assert not output.endswith("\n")

    def test_json_keeps_non_ascii(self):
        assert fn.marshal_json({"h": "caf\u00e9"}) == '{"h":"caf\u00e9"}'
        assert "\\u00e9" not in fn.marshal_json_pretty({"h": "caf\u00e9"})

    def test_json_grouped(self, virtual_hosts):
        groups = fn.group_by(virtual_hosts, "Env.VIRTUAL_HOST")
        decoded = json.loads(fn.marshal_json(groups))
        assert [c["ID"] for c in decoded["demo1.localhost"]] == ["1", "2"]


class TestFilesystemHelpers:
    """Tests for dir and exists."""

    def test_dir(self, tmp_path):
        (tmp_path / "b.conf").write_text("")
        (tmp_path / "a.conf").write_text("")
        (tmp_path / "sub").mkdir()
        assert fn.dir_list(str(tmp_path)) == ["a.conf", "b.conf", "sub"]

    def test_dir_unreadable(self, tmp_path):
        with pytest.raises(OSError):
            fn.dir_list(str(tmp_path / "missing"))

    def test_exists(self, tmp_path):
        assert fn.exists(str(tmp_path))
        assert not fn.exists(str(tmp_path / "missing"))


class TestFunctionLibrary:
    """Tests for the registered helper names."""

    def test_host_environ_is_injected(self):
        library = fn.build_function_library({"DOMAIN": "example.org"})
        assert library["hostEnviron"]("DOMAIN") == "example.org"
        assert library["hostEnviron"]("UNSET") == ""

    def test_host_environ_defaults_to_process(self, monkeypatch):
        monkeypatch.setenv("DGEN_TEST_VALUE", "from-process")
        library = fn.build_function_library()
        assert library["hostEnviron"]("DGEN_TEST_VALUE") == "from-process"

    def test_names(self):
        library = fn.build_function_library({})
        for name in ("groupBy", "groupByMulti", "groupByKeys", "contains", "keys", "dict",
                     "hasPrefix", "hasSuffix", "trimPrefix", "trimSuffix", "stringHead",
                     "stringTail", "closest", "first", "last", "json", "jsonPretty",
                     "sha1", "dir", "hostEnviron", "coalesce", "exists", "split", "replace"):
            assert callable(library[name])
