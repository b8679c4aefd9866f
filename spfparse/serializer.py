# -*- coding: utf-8 -*-
"""Renders SPF terms and records back to canonical text"""

from __future__ import annotations

import ipaddress
from typing import Callable, TYPE_CHECKING

from spfparse._constants import SPF_VERSION_TAG
from spfparse.terms import (
    IP4_MAX_PREFIX,
    IP6_MAX_PREFIX,
    A,
    All,
    Exists,
    Exp,
    Include,
    IP4,
    IP6,
    MX,
    Ptr,
    Redirect,
    Term,
    Unknown,
)

if TYPE_CHECKING:
    from spfparse.record import SPFRecord

"""Copyright 2019-2025 Sean Whalen

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

   https://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License."""


def _dual_cidr(ip4_prefix: int, ip6_prefix: int) -> str:
    suffix = ""
    if ip4_prefix != IP4_MAX_PREFIX:
        suffix += f"/{ip4_prefix}"
    if ip6_prefix != IP6_MAX_PREFIX:
        suffix += f"//{ip6_prefix}"
    return suffix


def _render_all(term: All) -> str:
    return f"{term.qualifier.value}all"


def _render_domain_mechanism(term: Include | Ptr | Exists) -> str:
    return f"{term.qualifier.value}{term.kind.value}:{term.domain_spec}"


def _render_host_mechanism(term: A | MX) -> str:
    cidr = _dual_cidr(term.ip4_prefix, term.ip6_prefix)
    return f"{term.qualifier.value}{term.kind.value}:{term.domain_spec}{cidr}"


def _render_ip4(term: IP4) -> str:
    address = str(ipaddress.IPv4Address(term.address))
    cidr = f"/{term.prefix}" if term.prefix != IP4_MAX_PREFIX else ""
    return f"{term.qualifier.value}ip4:{address}{cidr}"


def _render_ip6(term: IP6) -> str:
    # Always the exploded form so re-parsing yields identical text
    address = ipaddress.IPv6Address(term.address).exploded
    cidr = f"/{term.prefix}" if term.prefix != IP6_MAX_PREFIX else ""
    return f"{term.qualifier.value}ip6:{address}{cidr}"


def _render_domain_modifier(term: Redirect | Exp) -> str:
    return f"{term.kind.value}={term.domain_spec}"


def _render_unknown(term: Unknown) -> str:
    return f"{term.name}={term.value}"


_RENDERERS: dict[type, Callable[..., str]] = {
    All: _render_all,
    Include: _render_domain_mechanism,
    A: _render_host_mechanism,
    MX: _render_host_mechanism,
    Ptr: _render_domain_mechanism,
    IP4: _render_ip4,
    IP6: _render_ip6,
    Exists: _render_domain_mechanism,
    Redirect: _render_domain_modifier,
    Exp: _render_domain_modifier,
    Unknown: _render_unknown,
}


def render_term(term: Term) -> str:
    """
    Renders a term in its canonical form

    Mechanisms always carry an explicit qualifier and domain-spec, and only
    carry a CIDR suffix when the prefix length differs from the default.

    Args:
        term: An SPF term

    Returns:
        str: The canonical text of the term

    Raises:
        :exc:`TypeError`
    """
    try:
        renderer = _RENDERERS[type(term)]
    except KeyError:
        raise TypeError(f"Not an SPF term: {term!r}")
    return renderer(term)


def render_record(record: SPFRecord) -> str:
    """
    Renders every term of a parsed record after the version tag

    Args:
        record (SPFRecord): A parsed SPF record

    Returns:
        str: The canonical text of the record
    """
    return " ".join([SPF_VERSION_TAG] + [render_term(t) for t in record.terms])
