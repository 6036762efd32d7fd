import random
import string
import pytest
from dgen.PARSERS.image_parser import ImageParser
from dgen.PARSERS.endpoint_parser import EndpointParser
from dgen.PARSERS.config_parser import ConfigParser
from dgen.GENERATORS.template_functions import array_closest, string_head, string_tail
from dgen.errors import ConfigError, InvalidEndpoint

def random_string(length, alphabet=string.printable):
    return ''.join(random.choice(alphabet) for _ in range(length))

def test_fuzz_image_parser():
    # Splitting is lexical and must never raise
    for _ in range(200):
        reference = random_string(random.randint(0, 60), string.ascii_letters + "/:.-_@")
        ref = ImageParser.parse(reference)
        assert '/' not in ref.registry
        if not ref.registry:
            assert ':' not in ref.repository

def test_fuzz_endpoint_parser():
    for _ in range(200):
        addr = random_string(random.randint(0, 40), string.ascii_letters + string.digits + ":/.")
        try:
            proto, address = EndpointParser.parse(addr)
        except InvalidEndpoint:
            continue
        assert proto in ('unix', 'tcp', 'fd')

def test_fuzz_config_parser():
    parser = ConfigParser()
    for _ in range(100):
        content = random_string(random.randint(0, 500))
        try:
            parser.parse_from_string(content)
        except ConfigError:
            pass

def test_fuzz_string_helpers():
    for _ in range(200):
        s = random_string(random.randint(0, 30))
        n = random.randint(0, 40)
        assert s.startswith(string_head(s, n))
        assert s.endswith(string_tail(s, n))
        assert len(string_tail(s, n)) in (0, n)

def test_fuzz_closest():
    for _ in range(200):
        needle = random_string(random.randint(0, 20), "abc.")
        values = [random_string(random.randint(1, 6), "abc.") for _ in range(5)]
        best = array_closest(values, needle)
        assert best == "" or best in needle
        assert all(len(v) <= len(best) for v in values if v in needle)
