# -*- coding: utf-8 -*-
"""Macro expansion environment for a single SPF check"""

from __future__ import annotations

import ipaddress
import logging
import socket
import time
from typing import Optional

import dns.reversename

from spfparse._constants import MACRO_EXPANSION_MAX_LEN
from spfparse.utils import bounded_copy

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

# Macro letter: (field name, capacity)
MACRO_FIELDS: dict[str, tuple[str, int]] = {
    "s": ("sender", MACRO_EXPANSION_MAX_LEN),
    "l": ("local_part", MACRO_EXPANSION_MAX_LEN),
    "o": ("sender_domain", MACRO_EXPANSION_MAX_LEN),
    "d": ("domain", MACRO_EXPANSION_MAX_LEN),
    "i": ("ip", MACRO_EXPANSION_MAX_LEN),
    "p": ("ptr_domain", MACRO_EXPANSION_MAX_LEN),
    "v": ("ip_version", 8),
    "h": ("helo", MACRO_EXPANSION_MAX_LEN),
    "c": ("client_ip", 46),
    "r": ("receiver", MACRO_EXPANSION_MAX_LEN),
    "t": ("timestamp", 20),
}


class Environment:
    """
    The values SPF macros expand to during one check

    Each field is keyed by its macro letter and holds at most its capacity
    in characters. Longer values are truncated on :meth:`set`.
    """

    def __init__(self, defaults: bool = True):
        """
        Args:
            defaults (bool): Populate the receiver hostname (``r``) and the
                             current timestamp (``t``)
        """
        self._values: dict[str, str] = dict.fromkeys(MACRO_FIELDS, "")
        if defaults:
            try:
                self.set("r", socket.gethostname())
            except OSError as e:
                logger.debug(f"Unable to determine the local hostname: {e}")
            self.set("t", str(int(time.time())))

    def get(self, letter: str) -> Optional[tuple[str, int]]:
        """
        Gets the value of a field

        Args:
            letter (str): A macro letter (case-insensitive)

        Returns:
            tuple: The value and capacity of the field, or ``None`` if the
            letter is not a macro letter
        """
        letter = letter.lower()
        if letter not in MACRO_FIELDS:
            return None
        return self._values[letter], MACRO_FIELDS[letter][1]

    def set(self, letter: str, value: str) -> int:
        """
        Sets the value of a field, truncating it to the field's capacity

        Unrecognized letters are ignored.

        Args:
            letter (str): A macro letter (case-insensitive)
            value (str): The new value

        Returns:
            int: The length of ``value``, which is larger than the field's
            capacity if the stored value was truncated
        """
        letter = letter.lower()
        if letter not in MACRO_FIELDS:
            logger.debug(f"Ignoring unknown macro letter {letter!r}")
            return len(value)
        self._values[letter], length = bounded_copy(value, MACRO_FIELDS[letter][1])
        return length

    def set_sender(self, sender: str) -> None:
        """
        Sets ``s``, ``l`` and ``o`` from a MAIL FROM or HELO identity

        Args:
            sender (str): An email address or a bare domain
        """
        local_part, _, domain = sender.rpartition("@")
        if not local_part:
            # RFC 7208 § 4.3
            local_part = "postmaster"
            sender = f"{local_part}@{domain}"
        self.set("s", sender)
        self.set("l", local_part)
        self.set("o", domain)

    def set_client_address(self, ip_address: str) -> None:
        """
        Sets ``c``, ``i`` and ``v`` from the SMTP client address

        IPv6 addresses are written to ``i`` as dot-separated nibbles
        (RFC 7208 § 7.3).

        Args:
            ip_address (str): An IPv4 or IPv6 address

        Raises:
            :exc:`ValueError`
        """
        address = ipaddress.ip_address(ip_address)
        if address.version == 4:
            self.set("i", str(address))
            self.set("v", "in-addr")
        else:
            reverse_name = dns.reversename.from_address(str(address))
            nibbles = [label.decode() for label in reverse_name.labels[:32]]
            self.set("i", ".".join(reversed(nibbles)))
            self.set("v", "ip6")
        self.set("c", str(address))

    def to_dict(self) -> dict[str, str]:
        return {name: self._values[letter] for letter, (name, _) in MACRO_FIELDS.items()}

    def __repr__(self):
        return f"Environment({self.to_dict()!r})"
