# -*- coding: utf-8 -*-
"""SPF directive and modifier types"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import ClassVar, Union

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

DEFAULT_DOMAIN_SPEC = "%{d}"
IP4_MAX_PREFIX = 32
IP6_MAX_PREFIX = 128


class Qualifier(Enum):
    """The result a matching mechanism yields"""

    PASS = "+"
    FAIL = "-"
    SOFTFAIL = "~"
    NEUTRAL = "?"

    @property
    def result(self) -> str:
        return spf_qualifiers[self.value]


spf_qualifiers: dict[str, str] = {
    "?": "neutral",
    "+": "pass",
    "-": "fail",
    "~": "softfail",
}


class TermKind(Enum):
    ALL = "all"
    INCLUDE = "include"
    A = "a"
    MX = "mx"
    PTR = "ptr"
    IP4 = "ip4"
    IP6 = "ip6"
    EXISTS = "exists"
    REDIRECT = "redirect"
    EXP = "exp"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Mechanism:
    """Base class for terms that can produce a match"""

    kind: ClassVar[TermKind]
    qualifier: Qualifier = Qualifier.PASS


@dataclass(frozen=True)
class Modifier:
    """Base class for terms that supply auxiliary data"""

    kind: ClassVar[TermKind]


@dataclass(frozen=True)
class All(Mechanism):
    kind: ClassVar[TermKind] = TermKind.ALL


@dataclass(frozen=True)
class Include(Mechanism):
    kind: ClassVar[TermKind] = TermKind.INCLUDE
    domain_spec: str = DEFAULT_DOMAIN_SPEC


@dataclass(frozen=True)
class A(Mechanism):
    kind: ClassVar[TermKind] = TermKind.A
    domain_spec: str = DEFAULT_DOMAIN_SPEC
    ip4_prefix: int = IP4_MAX_PREFIX
    ip6_prefix: int = IP6_MAX_PREFIX


@dataclass(frozen=True)
class MX(Mechanism):
    kind: ClassVar[TermKind] = TermKind.MX
    domain_spec: str = DEFAULT_DOMAIN_SPEC
    ip4_prefix: int = IP4_MAX_PREFIX
    ip6_prefix: int = IP6_MAX_PREFIX


@dataclass(frozen=True)
class Ptr(Mechanism):
    kind: ClassVar[TermKind] = TermKind.PTR
    domain_spec: str = DEFAULT_DOMAIN_SPEC


@dataclass(frozen=True)
class IP4(Mechanism):
    kind: ClassVar[TermKind] = TermKind.IP4
    address: str = "0.0.0.0"
    prefix: int = IP4_MAX_PREFIX


@dataclass(frozen=True)
class IP6(Mechanism):
    kind: ClassVar[TermKind] = TermKind.IP6
    address: str = "::"
    prefix: int = IP6_MAX_PREFIX


@dataclass(frozen=True)
class Exists(Mechanism):
    kind: ClassVar[TermKind] = TermKind.EXISTS
    domain_spec: str = DEFAULT_DOMAIN_SPEC


@dataclass(frozen=True)
class Redirect(Modifier):
    kind: ClassVar[TermKind] = TermKind.REDIRECT
    domain_spec: str = DEFAULT_DOMAIN_SPEC


@dataclass(frozen=True)
class Exp(Modifier):
    kind: ClassVar[TermKind] = TermKind.EXP
    domain_spec: str = DEFAULT_DOMAIN_SPEC


@dataclass(frozen=True)
class Unknown(Modifier):
    """A modifier this package does not know, kept for forward compatibility"""

    kind: ClassVar[TermKind] = TermKind.UNKNOWN
    name: str = ""
    value: str = ""


Term = Union[All, Include, A, MX, Ptr, IP4, IP6, Exists, Redirect, Exp, Unknown]


def term_to_dict(term: Term) -> dict:
    """
    Converts a term to a ``dict`` suitable for JSON output

    Args:
        term: An SPF term

    Returns:
        dict: A ``dict`` with a ``mechanism`` or ``modifier`` key, an
        ``action`` for mechanisms, and the term's own fields
    """
    if isinstance(term, Mechanism):
        result = {
            "action": term.qualifier.result,
            "mechanism": term.kind.value,
        }
    else:
        result = {"modifier": term.kind.value}
    for field in fields(term):
        if field.name == "qualifier":
            continue
        result[field.name] = getattr(term, field.name)
    return result
