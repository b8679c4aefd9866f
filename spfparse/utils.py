# -*- coding: utf-8 -*-
"""Shared string utilities and base exceptions"""

from __future__ import annotations

import re
from typing import Optional

from spfparse._constants import DOMAIN_NAME_MAX_LEN

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

WSP = frozenset(" \t")
DOT_RUN_REGEX = re.compile(r"\.{2,}")


class SPFError(Exception):
    """Raised when a fatal SPF error occurs"""

    def __init__(self, msg: str, data: Optional[dict] = None):
        """
        Args:
            msg (str): The error message
            data (dict): A dictionary of data to include in the output
        """
        self.data = data
        Exception.__init__(self, msg)


class SPFNameTooLong(SPFError):
    """Raised when a domain name or domain-spec exceeds its maximum length"""


class SPFMacroLengthExceeded(SPFError):
    """Raised when a macro expansion exceeds the working capacity"""


def bounded_copy(src: str, capacity: int) -> tuple[str, int]:
    """
    Copies a string into a destination of fixed capacity

    Args:
        src (str): The source string
        capacity (int): The maximum number of characters to keep

    Returns:
        tuple: The (possibly truncated) copy and the length of ``src``, so
        callers can detect truncation by comparing it to ``capacity``
    """
    if capacity < 0:
        capacity = 0
    return src[:capacity], len(src)


def normalize_domain(
    domain: str, capacity: int = DOMAIN_NAME_MAX_LEN
) -> tuple[str, int]:
    """
    Normalize a domain by removing leading dots and collapsing runs of dots

    Case is preserved. ``"...a..b."`` becomes ``"a.b."``.

    Args:
        domain (str): A domain, subdomain or domain-spec
        capacity (int): The maximum length of the normalized domain

    Returns:
        tuple: The normalized domain, truncated to ``capacity``, and the
        untruncated length of the normalized domain
    """
    normalized = DOT_RUN_REGEX.sub(".", domain.lstrip("."))
    return bounded_copy(normalized, capacity)
