# -*- coding: utf-8 -*-
"""Sender Policy framework (SPF) record parsing"""

from __future__ import annotations

import ipaddress
import logging
import re
from dataclasses import dataclass
from typing import Callable, NoReturn, Optional, Union

import dns.rdata
import dns.rdatatype
from dns.rdatatype import RdataType
import pyleri

from spfparse._constants import (
    DOMAIN_NAME_MAX_LEN,
    DOMAIN_SPEC_MAX_LEN,
    ERROR_CONTEXT_LEN,
    SPF_VERSION_TAG,
    SYNTAX_ERROR_MARKER,
)
from spfparse.serializer import render_record
from spfparse.terms import (
    DEFAULT_DOMAIN_SPEC,
    IP4_MAX_PREFIX,
    IP6_MAX_PREFIX,
    A,
    All,
    Exists,
    Exp,
    Include,
    IP4,
    IP6,
    Mechanism,
    MX,
    Ptr,
    Qualifier,
    Redirect,
    Term,
    Unknown,
    term_to_dict,
)
from spfparse.utils import WSP, SPFError, SPFNameTooLong, normalize_domain

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

logger = logging.getLogger(__name__)

MACRO_EXPAND_REGEX_STRING = r"%(?:\{[slodiphcrtv][0-9]*r?[.\-+,/_=]*\}|[%_\-])"
MACRO_LITERAL_REGEX_STRING = r"[\x21-\x24\x26-\x7e]"
TOPLABEL_REGEX_STRING = r"(?:[0-9]*[a-z][a-z0-9]*|[a-z0-9]+-[a-z0-9\-]*[a-z0-9])"

NAME_REGEX = re.compile(r"[a-z][a-z0-9\-_.]*", re.IGNORECASE)
DOMAIN_END_REGEX = re.compile(
    rf"(?:\.{TOPLABEL_REGEX_STRING}\.?|{MACRO_EXPAND_REGEX_STRING})$",
    re.IGNORECASE,
)

QUALIFIERS = frozenset("+-~?")
DIGITS = frozenset("0123456789")
IP4_CHARS = frozenset("0123456789.")
IP6_CHARS = frozenset("0123456789abcdefABCDEF:.")
SPF_RECORD_TYPES = (RdataType.TXT, RdataType.SPF)


class SPFSyntaxError(SPFError):
    """Raised when an SPF syntax error is found"""

    def __init__(self, msg: str, record: SPFRecord, context: SPFErrorContext):
        """
        Args:
            msg (str): The error message
            record (SPFRecord): The record with the terms parsed before the
                                error
            context (SPFErrorContext): Where the error occurred
        """
        self.record = record
        self.context = context
        SPFError.__init__(self, msg, data=context.to_dict())


class _MacroStringGrammar(pyleri.Grammar):
    """Defines Pyleri grammar for SPF macro-strings"""

    macro_expand = pyleri.Regex(MACRO_EXPAND_REGEX_STRING, re.IGNORECASE)
    macro_literal = pyleri.Regex(MACRO_LITERAL_REGEX_STRING)

    START = pyleri.Repeat(pyleri.Choice(macro_expand, macro_literal))


@dataclass(frozen=True)
class SPFErrorContext:
    """The location of a syntax error in raw record data"""

    offset: int
    byte: Optional[bytes]
    context: bytes

    def to_dict(self) -> dict:
        return {
            "offset": self.offset,
            "byte": self.byte.decode("latin-1") if self.byte else None,
            "context": self.context.decode("utf-8", errors="replace"),
        }


class SPFRecord:
    """
    The ordered terms of one SPF record

    Terms are kept in the order they appear in the record, since evaluation
    order is significant. A record that failed to parse keeps the terms
    parsed before the error, and the location of the error in ``error``.
    """

    def __init__(
        self,
        domain: str,
        record_type: Union[RdataType, str, int] = RdataType.TXT,
    ):
        """
        Args:
            domain (str): The domain the record was published on
            record_type: The DNS type the record was retrieved as
                         (``TXT`` or ``SPF``)

        Raises:
            :exc:`spfparse.utils.SPFNameTooLong`
            :exc:`ValueError`
        """
        self.domain, length = normalize_domain(domain, DOMAIN_NAME_MAX_LEN)
        if length > DOMAIN_NAME_MAX_LEN:
            raise SPFNameTooLong(
                f"The domain name is {length} characters long, "
                f"the maximum is {DOMAIN_NAME_MAX_LEN}",
                data={"length": length},
            )
        try:
            self.record_type = RdataType.make(record_type)
        except dns.rdatatype.UnknownRdatatype:
            raise ValueError(f"Unknown DNS record type {record_type}")
        if self.record_type not in SPF_RECORD_TYPES:
            raise ValueError(
                f"SPF records are not published as {self.record_type.name} records"
            )
        self.terms: list[Term] = []
        self.error: Optional[SPFErrorContext] = None

    @property
    def mechanisms(self) -> list[Term]:
        return [term for term in self.terms if isinstance(term, Mechanism)]

    @property
    def redirect(self) -> Optional[Redirect]:
        for term in self.terms:
            if isinstance(term, Redirect):
                return term
        return None

    @property
    def exp(self) -> Optional[Exp]:
        for term in self.terms:
            if isinstance(term, Exp):
                return term
        return None

    def to_dict(self) -> dict:
        """
        Returns:
            dict: A ``dict`` with the following keys:
                - ``domain`` - The normalized domain name
                - ``record_type`` - ``TXT`` or ``SPF``
                - ``terms`` - A ``list`` of terms, see
                  :func:`spfparse.terms.term_to_dict`
                - ``error`` - The error location, or ``None``
        """
        return {
            "domain": self.domain,
            "record_type": self.record_type.name,
            "terms": [term_to_dict(term) for term in self.terms],
            "error": self.error.to_dict() if self.error else None,
        }

    def __str__(self):
        return render_record(self)

    def __repr__(self):
        return f"SPFRecord({self.domain!r}, terms={self.terms!r})"


class _RecordParser:
    """Single pass scanner over the raw bytes of a record"""

    def __init__(self, record: SPFRecord, rdata: bytes):
        self.record = record
        self._raw = rdata
        # latin-1 keeps character offsets equal to byte offsets
        self._text = rdata.decode("latin-1")
        self._length = len(self._text)
        self._pos = 0
        self._grammar = _MacroStringGrammar()
        self._seen_modifiers: set[str] = set()
        self._reset()

    def _reset(self) -> None:
        self._qualifier = Qualifier.PASS
        self._domain = DEFAULT_DOMAIN_SPEC
        self._ip4_prefix = IP4_MAX_PREFIX
        self._ip6_prefix = IP6_MAX_PREFIX

    def _peek(self) -> str:
        if self._pos < self._length:
            return self._text[self._pos]
        return ""

    def _fail(self, offset: int, reason: str) -> NoReturn:
        start = max(0, offset - ERROR_CONTEXT_LEN)
        context = SPFErrorContext(
            offset=offset,
            byte=self._raw[offset : offset + 1] or None,
            context=self._raw[start : offset + 1],
        )
        self.record.error = context
        marker = SYNTAX_ERROR_MARKER.encode()
        marked_record = (self._raw[:offset] + marker + self._raw[offset:]).decode(
            "utf-8", errors="replace"
        )
        logger.debug(f"{self.record.domain}: {reason} at position {offset}")
        raise SPFSyntaxError(
            f"{self.record.domain}: {reason} at position {offset} "
            f"(marked with {SYNTAX_ERROR_MARKER}) in: {marked_record}",
            record=self.record,
            context=context,
        )

    def _expect(self, ch: str) -> None:
        if self._peek() != ch:
            self._fail(self._pos, f"Expected {ch!r}")
        self._pos += 1

    def parse(self) -> SPFRecord:
        for i, expected in enumerate(SPF_VERSION_TAG):
            if self._text[i : i + 1].lower() != expected:
                self._fail(i, f"Expected {SPF_VERSION_TAG}")
        self._pos = len(SPF_VERSION_TAG)
        while self._pos < self._length:
            if self._peek() not in WSP:
                self._fail(self._pos, "Expected whitespace or the end of the record")
            while self._peek() in WSP:
                self._pos += 1
            if self._pos < self._length:
                self._term()
        return self.record

    def _term(self) -> None:
        self._reset()
        start = self._pos
        if self._peek() in QUALIFIERS:
            self._qualifier = Qualifier(self._peek())
            self._pos += 1
        name_match = NAME_REGEX.match(self._text, self._pos)
        if name_match is None:
            self._fail(self._pos, "Expected a mechanism or modifier")
        name = name_match.group()
        keyword = name.lower()
        self._pos = name_match.end()

        if self._peek() == "=":
            if name_match.start() != start:
                self._fail(self._pos, "Modifiers cannot have a qualifier")
            self._pos += 1
            term = self._modifier(name, keyword, start)
        elif keyword in _MECHANISMS:
            term = _MECHANISMS[keyword](self)
        else:
            self._fail(self._pos, f"Unknown mechanism {name}")
        self.record.terms.append(term)
        logger.debug(f"{self.record.domain}: parsed {term!r}")

    def _capture(self, stop: frozenset[str] = frozenset()) -> tuple[int, str]:
        """Captures visible characters up to a blank, a stop character or the end

        Stop characters inside a ``%{...}`` macro-expand are delimiters, not
        stops.
        """
        start = self._pos
        in_macro = False
        while self._pos < self._length:
            ch = self._text[self._pos]
            if not "\x21" <= ch <= "\x7e":
                break
            if in_macro:
                if ch == "}":
                    in_macro = False
            elif ch == "%" and self._text[self._pos + 1 : self._pos + 2] in ("{", "%"):
                in_macro = self._text[self._pos + 1] == "{"
                self._pos += 1
            elif ch in stop:
                break
            self._pos += 1
        value = self._text[start : self._pos]
        if len(value) > DOMAIN_SPEC_MAX_LEN:
            raise SPFNameTooLong(
                f"{self.record.domain}: The value at position {start} is "
                f"{len(value)} characters long, the maximum is "
                f"{DOMAIN_SPEC_MAX_LEN}",
                data={"offset": start, "length": len(value)},
            )
        return start, value

    def _macro_string(self, stop: frozenset[str] = frozenset()) -> str:
        start, value = self._capture(stop)
        if value:
            parsed = self._grammar.parse(value)
            if not parsed.is_valid:
                self._fail(
                    start + min(parsed.pos, len(value)), "Invalid SPF macro syntax"
                )
        return value

    def _domain_spec(self, stop: frozenset[str] = frozenset()) -> str:
        value = self._macro_string(stop)
        if value == "":
            self._fail(self._pos, "Expected a domain-spec")
        domain_spec, _ = normalize_domain(value, DOMAIN_SPEC_MAX_LEN)
        if DOMAIN_END_REGEX.search(domain_spec) is None:
            self._fail(
                self._pos, "Expected a domain-spec ending in a top-level label or macro"
            )
        return domain_spec

    def _cidr_length(self, maximum: int) -> int:
        value = 0
        digits = 0
        while self._peek() in DIGITS:
            if digits == 1 and value == 0:
                self._fail(self._pos, "CIDR lengths cannot have leading zeros")
            value = value * 10 + int(self._peek())
            if value > maximum:
                self._fail(self._pos, f"CIDR length exceeds {maximum}")
            digits += 1
            self._pos += 1
        if digits == 0:
            self._fail(self._pos, "Expected a CIDR length")
        return value

    def _dual_cidr(self) -> None:
        if self._peek() != "/":
            return
        self._pos += 1
        if self._peek() != "/":
            self._ip4_prefix = self._cidr_length(IP4_MAX_PREFIX)
            if self._peek() != "/":
                return
            self._pos += 1
            if self._peek() != "/":
                self._fail(self._pos, "Expected '//' before an IPv6 CIDR length")
        self._pos += 1
        self._ip6_prefix = self._cidr_length(IP6_MAX_PREFIX)

    def _ip_literal(
        self, chars: frozenset[str], factory: Callable, label: str
    ) -> str:
        start = self._pos
        while self._peek() in chars:
            self._pos += 1
        literal = self._text[start : self._pos]
        try:
            factory(literal)
        except ValueError:
            self._fail(start, f"{literal} is not a valid {label} value")
        return literal

    def _modifier(self, name: str, keyword: str, start: int) -> Term:
        if keyword in ("redirect", "exp"):
            if keyword in self._seen_modifiers:
                self._fail(start, f"Multiple {keyword} modifiers")
            self._seen_modifiers.add(keyword)
            if keyword == "redirect":
                return Redirect(domain_spec=self._domain_spec())
            return Exp(domain_spec=self._domain_spec())
        # Any value is accepted so newer modifiers do not break parsing
        _, value = self._capture()
        return Unknown(name=name, value=value)

    def _all(self) -> Term:
        return All(qualifier=self._qualifier)

    def _include(self) -> Term:
        self._expect(":")
        return Include(qualifier=self._qualifier, domain_spec=self._domain_spec())

    def _exists(self) -> Term:
        self._expect(":")
        return Exists(qualifier=self._qualifier, domain_spec=self._domain_spec())

    def _ptr(self) -> Term:
        if self._peek() == ":":
            self._pos += 1
            self._domain = self._domain_spec()
        return Ptr(qualifier=self._qualifier, domain_spec=self._domain)

    def _host(self, mechanism: type) -> Term:
        if self._peek() == ":":
            self._pos += 1
            self._domain = self._domain_spec(stop=frozenset("/"))
        self._dual_cidr()
        return mechanism(
            qualifier=self._qualifier,
            domain_spec=self._domain,
            ip4_prefix=self._ip4_prefix,
            ip6_prefix=self._ip6_prefix,
        )

    def _a(self) -> Term:
        return self._host(A)

    def _mx(self) -> Term:
        return self._host(MX)

    def _ip4(self) -> Term:
        self._expect(":")
        address = self._ip_literal(IP4_CHARS, ipaddress.IPv4Address, "ipv4")
        if self._peek() == "/":
            self._pos += 1
            self._ip4_prefix = self._cidr_length(IP4_MAX_PREFIX)
        return IP4(qualifier=self._qualifier, address=address, prefix=self._ip4_prefix)

    def _ip6(self) -> Term:
        self._expect(":")
        address = self._ip_literal(IP6_CHARS, ipaddress.IPv6Address, "ipv6")
        if self._peek() == "/":
            self._pos += 1
            self._ip6_prefix = self._cidr_length(IP6_MAX_PREFIX)
        return IP6(qualifier=self._qualifier, address=address, prefix=self._ip6_prefix)


_MECHANISMS: dict[str, Callable[[_RecordParser], Term]] = {
    "all": _RecordParser._all,
    "include": _RecordParser._include,
    "a": _RecordParser._a,
    "mx": _RecordParser._mx,
    "ptr": _RecordParser._ptr,
    "ip4": _RecordParser._ip4,
    "ip6": _RecordParser._ip6,
    "exists": _RecordParser._exists,
}


def parse_spf_record(
    rdata: Union[bytes, bytearray, memoryview, str],
    domain: str,
    *,
    record_type: Union[RdataType, str, int] = RdataType.TXT,
) -> SPFRecord:
    """
    Parses an SPF record

    Args:
        rdata: The raw record, as bytes or as text which is UTF-8 encoded
        domain (str): The domain the record was published on
        record_type: The DNS type the record was retrieved as

    Returns:
        SPFRecord: The parsed record

    Raises:
        :exc:`spfparse.record.SPFSyntaxError`
        :exc:`spfparse.utils.SPFNameTooLong`
    """
    if isinstance(rdata, str):
        rdata = rdata.encode("utf-8")
    record = SPFRecord(domain, record_type)
    logger.debug(f"Parsing the SPF record on {record.domain}")
    return _RecordParser(record, bytes(rdata)).parse()


def parse_txt_rdata(rdata: dns.rdata.Rdata, domain: str) -> SPFRecord:
    """
    Parses an SPF record from a TXT or SPF resource record

    The character-strings of the resource record are concatenated without
    separators (RFC 7208 § 3.3).

    Args:
        rdata (dns.rdata.Rdata): A TXT or SPF rdata from a DNS answer
        domain (str): The domain the record was published on

    Returns:
        SPFRecord: The parsed record

    Raises:
        :exc:`spfparse.record.SPFSyntaxError`
        :exc:`spfparse.utils.SPFNameTooLong`
    """
    return parse_spf_record(
        b"".join(rdata.strings), domain, record_type=rdata.rdtype
    )
