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
Helper functions exposed to templates.

Every helper is registered under the name templates use (``groupBy``,
``jsonPretty`` ...); see build_function_library().
"""
import hashlib
import json
import os
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel

from ..MODELS.runtime_container import RuntimeContainer
from ..errors import IndexOutOfRange, InvalidArity, KeyTypeError, MalformedInput, TypeMismatch


def deep_get(item: Any, path: str) -> Any:
    """
    Resolve a dotted path such as 'Env.VIRTUAL_HOST' against a container.

    Model fields match either their attribute name or their alias, so
    'Env.VIRTUAL_HOST' and 'env.VIRTUAL_HOST' are equivalent. Mapping
    segments are plain key lookups.

    Returns:
        The value found, or None if any segment is missing.
    """
    value = item
    for segment in path.split("."):
        if value is None:
            return None
        if isinstance(value, BaseModel):
            value = _model_field(value, segment)
        elif isinstance(value, Mapping):
            value = value.get(segment)
        else:
            return None
    return value


def model_field_name(model: BaseModel, segment: str) -> Optional[str]:
    """Attribute name of the field called or aliased ``segment``, if any."""
    fields = type(model).model_fields
    if segment in fields:
        return segment
    for name, field in fields.items():
        if field.alias == segment:
            return name
    return None


def _model_field(model: BaseModel, segment: str) -> Any:
    name = model_field_name(model, segment)
    if name is None:
        return None
    return getattr(model, name)


def group_by_multi(entries: Iterable[RuntimeContainer], key: str, sep: str) -> Dict[str, List[RuntimeContainer]]:
    """
    Group containers by the value at ``key`` split on ``sep``; a container
    appears once in every group its value names.
    """
    groups: Dict[str, List[RuntimeContainer]] = {}
    for entry in entries:
        value = deep_get(entry, key)
        if not isinstance(value, str):
            continue
        for item in value.split(sep):
            groups.setdefault(item, []).append(entry)
    return groups


def group_by(entries: Iterable[RuntimeContainer], key: str) -> Dict[str, List[RuntimeContainer]]:
    """
    Group containers by the string value at dotted path ``key``.

    Containers without a string value at ``key`` are left out. Groups are
    ordered by first occurrence.
    """
    groups: Dict[str, List[RuntimeContainer]] = {}
    for entry in entries:
        value = deep_get(entry, key)
        if isinstance(value, str):
            groups.setdefault(value, []).append(entry)
    return groups


def group_by_keys(entries: Iterable[RuntimeContainer], key: str) -> List[str]:
    """Same as group_by() but only returns the group keys."""
    return list(group_by(entries, key))


def has_prefix(prefix: str, s: str) -> bool:
    return s.startswith(prefix)


def has_suffix(suffix: str, s: str) -> bool:
    return s.endswith(suffix)


def trim_prefix(prefix: str, s: str) -> str:
    if prefix and s.startswith(prefix):
        return s[len(prefix):]
    return s


def trim_suffix(suffix: str, s: str) -> str:
    if suffix and s.endswith(suffix):
        return s[:-len(suffix)]
    return s


def keys(value: Any) -> Optional[List[Any]]:
    """
    Keys of a mapping, in iteration order.

    :raises TypeMismatch: If ``value`` is not a mapping.
    """
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise TypeMismatch(f"Cannot call keys on a non-map value: {value!r}")
    return list(value.keys())


def contains(item: Optional[Mapping], key: str) -> bool:
    if item is None:
        return False
    return key in item


def make_dict(*values: Any) -> Dict[str, Any]:
    """
    Build a mapping from alternating keys and values.

    :raises InvalidArity: On an odd number of arguments.
    :raises KeyTypeError: If a key is not a string.
    """
    if len(values) % 2 != 0:
        raise InvalidArity("invalid dict call: expected an even number of arguments")
    result = {}
    for i in range(0, len(values), 2):
        key = values[i]
        if not isinstance(key, str):
            raise KeyTypeError(f"dict keys must be strings, got {key!r}")
        result[key] = values[i + 1]
    return result


def hash_sha1(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def _encode_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def marshal_json(value: Any) -> str:
    """Compact JSON; models are encoded by their aliases."""
    return json.dumps(value, default=_encode_default, separators=(",", ":"), ensure_ascii=False)


def marshal_json_pretty(value: Any) -> str:
    """JSON indented by four spaces."""
    return json.dumps(value, default=_encode_default, indent=4, ensure_ascii=False)


def array_first(value: Optional[Sequence]) -> Any:
    """First item, or None if ``value`` is None or empty."""
    if not value:
        return None
    return value[0]


def array_last(value: Sequence) -> Any:
    """
    Last item.

    :raises IndexOutOfRange: If ``value`` is empty.
    """
    if not value:
        raise IndexOutOfRange("Cannot call last on an empty sequence")
    return value[-1]


def array_closest(values: Iterable[str], target: str) -> str:
    """
    The longest of ``values`` contained in ``target``; ties go to the
    earliest. Returns '' if none match.
    """
    best = ""
    for value in values:
        if value in target and len(value) > len(best):
            best = value
    return best


def dir_list(path: str) -> List[str]:
    """
    Names of the entries directly under ``path``, sorted.

    :raises OSError: If ``path`` cannot be listed.
    """
    return sorted(os.listdir(path))


def coalesce(*values: Any) -> Any:
    """First argument that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def exists(path: str) -> bool:
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def split(s: str, sep: str) -> List[str]:
    return s.split(sep)


def replace(s: str, old: str, new: str, n: int = -1) -> str:
    """Replace the first ``n`` occurrences; negative ``n`` replaces all."""
    return s.replace(old, new, n)


def _check_length(name: str, length: int) -> None:
    if length < 0:
        raise MalformedInput(f"{name} length must not be negative, got {length}")


def string_head(s: str, length: int) -> str:
    """
    The first ``length`` characters of ``s``.

    :raises MalformedInput: If ``length`` is negative.
    """
    _check_length("stringHead", length)
    if len(s) <= length:
        return s
    return s[:length]


def string_tail(s: str, length: int) -> str:
    """
    The last ``length`` characters of ``s``, or '' unless ``s`` is longer
    than ``length``.

    :raises MalformedInput: If ``length`` is negative.
    """
    _check_length("stringTail", length)
    if len(s) <= length:
        return ""
    return s[len(s) - length:]


def host_environ_lookup(environ: Mapping) -> Callable[[str], str]:
    """
    Bind hostEnviron to a read-only environment mapping.
    """
    def host_environ(name: str) -> str:
        return environ.get(name, "")
    return host_environ


def build_function_library(environ: Optional[Mapping] = None) -> Dict[str, Callable]:
    """
    All helpers keyed by their template name.

    :param environ: Mapping read by hostEnviron; defaults to os.environ.
    """
    if environ is None:
        environ = os.environ
    return {
        "closest": array_closest,
        "coalesce": coalesce,
        "contains": contains,
        "dict": make_dict,
        "dir": dir_list,
        "exists": exists,
        "first": array_first,
        "groupBy": group_by,
        "groupByKeys": group_by_keys,
        "groupByMulti": group_by_multi,
        "hasPrefix": has_prefix,
        "hasSuffix": has_suffix,
        "json": marshal_json,
        "jsonPretty": marshal_json_pretty,
        "keys": keys,
        "last": array_last,
        "replace": replace,
        "sha1": hash_sha1,
        "split": split,
        "trimPrefix": trim_prefix,
        "trimSuffix": trim_suffix,
        "stringHead": string_head,
        "stringTail": string_tail,
        "hostEnviron": host_environ_lookup(environ),
    }
