"""
Tests for deterministic hashing and resource naming.
"""

import hashlib
import re

import pytest

from jvmbuild.naming import (
    MAX_NAME_LENGTH,
    content_hash,
    coordinate_key,
    generate_resource_name,
    source_identity,
)

DNS_SUBDOMAIN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")


class TestContentHash:
    """Tests for content_hash and coordinate_key."""

    def test_is_32_hex_chars(self):
        digest = content_hash("org.foo:bar:1.2.3")
        assert re.fullmatch(r"[0-9a-f]{32}", digest)

    def test_known_value(self):
        assert content_hash("") == "d41d8cd98f00b204e9800998ecf8427e"

    def test_stable(self):
        assert content_hash("abc") == content_hash("abc")

    def test_coordinate_key_is_content_hash(self):
        gav = "commons-net:commons-net:3.6"
        assert coordinate_key(gav) == content_hash(gav)


class TestSourceIdentity:
    """Tests for source_identity."""

    def test_concatenates_without_separator(self):
        url, tag, path = "https://example/repo", "v1", "sub"
        assert source_identity(url, tag, path) == content_hash(url + tag + path)

    def test_deterministic(self):
        assert source_identity("https://example/repo", "v1", "") == source_identity(
            "https://example/repo", "v1", ""
        )

    def test_order_sensitive(self):
        assert source_identity("https://example/repo", "v1", "core") != source_identity(
            "https://example/repo", "core", "v1"
        )

    def test_different_tags_differ(self):
        assert source_identity("https://example/repo", "v1", "") != source_identity(
            "https://example/repo", "v2", ""
        )


class TestGenerateResourceName:
    """Tests for generate_resource_name."""

    def test_example_coordinate(self):
        gav = "org.foo:bar:1.2.3"
        name = generate_resource_name(gav)
        assert re.fullmatch(r"bar\.1\.2\.3-[0-9a-f]{8}", name)
        assert name.endswith(hashlib.sha1(gav.encode()).hexdigest()[:8])

    def test_same_gav_same_name(self):
        assert generate_resource_name("org.foo:bar:1.2.3") == generate_resource_name("org.foo:bar:1.2.3")

    def test_different_gav_different_name(self):
        assert generate_resource_name("org.foo:bar:1.2.3") != generate_resource_name("org.foo:bar:1.2.4")

    def test_group_only_changes_hash(self):
        a = generate_resource_name("org.foo:bar:1.0")
        b = generate_resource_name("org.baz:bar:1.0")
        assert a.split("-")[0] == b.split("-")[0] == "bar.1.0"
        assert a != b

    def test_lower_cases_and_collapses_runs(self):
        name = generate_resource_name("Org.Foo:Bar__Baz:1.0--SNAPSHOT")
        assert name.startswith("bar.baz.1.0.snapshot-")

    def test_commons_net(self):
        name = generate_resource_name("commons-net:commons-net:3.6")
        assert name.startswith("commons.net.3.6-")

    def test_without_colon_uses_whole_string(self):
        assert generate_resource_name("justname").startswith("justname-")

    def test_empty_name_part_is_hash_only(self):
        name = generate_resource_name("org.foo:")
        assert re.fullmatch(r"[0-9a-f]{8}", name)

    @pytest.mark.parametrize("gav", [
        "org.foo:bar:1.2.3",
        "g:-leading:1.0-",
        "g:a:1.0.",
        "g:ÄÖü:1",
        "g:a b c:1 2",
        "::",
        "g:" + "x" * 400 + ":1",
    ])
    def test_always_dns_safe(self, gav):
        name = generate_resource_name(gav)
        assert name == name.lower()
        assert len(name) <= MAX_NAME_LENGTH
        assert DNS_SUBDOMAIN.match(name), name
