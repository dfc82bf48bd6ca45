"""
Deterministic hashing and naming for generated resources.

All identifiers produced here are stable across processes and releases:
they are persisted as label values and resource names, so a change in
any function below silently changes the deduplication key space.

- content_hash: 32-char hex digest used as a lookup key (not for secrecy)
- coordinate_key: content_hash of a GAV, labels the discovery task
- source_identity: content_hash of SCM URL + tag + path, labels the
  DependencyBuild and is the deduplication key for builds
- generate_resource_name: readable, DNS-safe ArtifactBuild name for a GAV
"""

from __future__ import annotations

import hashlib
import re

# DNS-1123 subdomain limit for resource names
MAX_NAME_LENGTH = 253

# Hex characters of the SHA-1 suffix appended to generated names
NAME_HASH_LENGTH = 8

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")


def content_hash(value: str) -> str:
    """Return the 32 hex character MD5 digest of ``value``."""
    return hashlib.md5(value.encode("utf-8"), usedforsecurity=False).hexdigest()


def coordinate_key(gav: str) -> str:
    """Label value linking a GAV to its discovery task."""
    return content_hash(gav)


def source_identity(url: str, tag: str, path: str) -> str:
    """
    Deduplication key for a source location.

    The three parts are concatenated without a separator. Existing
    DependencyBuild labels were computed this way, so a separator must
    never be introduced.
    """
    return content_hash(url + tag + path)


def generate_resource_name(gav: str) -> str:
    """
    Derive an ArtifactBuild name from a GAV.

    Takes everything after the first colon, collapses each run of
    non-alphanumeric characters into a single dot, lower-cases it and
    appends the first 8 hex chars of the SHA-1 of the full GAV:

        >>> generate_resource_name("org.foo:bar:1.2.3")  # doctest: +SKIP
        'bar.1.2.3-1c4e0d2a'

    Leading and trailing dots are dropped so the result is always a valid
    DNS-1123 subdomain.
    """
    digest = hashlib.sha1(gav.encode("utf-8")).hexdigest()[:NAME_HASH_LENGTH]
    name_part = gav[gav.find(":") + 1:]
    name_part = _NON_ALNUM.sub(".", name_part).strip(".").lower()
    if not name_part:
        return digest
    name_part = name_part[: MAX_NAME_LENGTH - NAME_HASH_LENGTH - 1].rstrip(".")
    return f"{name_part}-{digest}"
