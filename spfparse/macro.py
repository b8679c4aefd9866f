# -*- coding: utf-8 -*-
"""SPF macro expansion (RFC 7208 § 7)"""

from __future__ import annotations

import logging
import re

from spfparse._constants import MACRO_EXPANSION_MAX_LEN, MACRO_MAX_PARTS
from spfparse.environment import Environment
from spfparse.utils import SPFMacroLengthExceeded, bounded_copy

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

MACRO_TRANSFORMERS_REGEX = re.compile(r"([0-9]*)([rR]?)(.*)", re.DOTALL)
DEFAULT_DELIMITERS = "."


def _split(value: str, delimiters: str) -> list[str]:
    parts = [""]
    for ch in value:
        if ch in delimiters:
            if len(parts) == MACRO_MAX_PARTS:
                raise SPFMacroLengthExceeded(
                    f"Macro value splits into more than {MACRO_MAX_PARTS} parts",
                    data={"max_parts": MACRO_MAX_PARTS},
                )
            parts.append("")
        else:
            parts[-1] += ch
    return parts


def _expand_macro_spec(spec: str, environment: Environment) -> str:
    """Expands the body of a single ``%{...}`` macro"""
    if not spec:
        logger.debug("Empty macro expands to nothing")
        return ""
    field = environment.get(spec[0])
    if field is None:
        logger.debug(f"Unknown macro letter {spec[0]!r} expands to nothing")
        return ""
    value = field[0]
    if len(value) >= MACRO_EXPANSION_MAX_LEN:
        raise SPFMacroLengthExceeded(
            f"The value of %{{{spec[0]}}} is {len(value)} characters long, "
            f"the maximum is {MACRO_EXPANSION_MAX_LEN - 1}",
            data={"length": len(value)},
        )
    if value == "":
        return ""

    digits, reverse, delimiters = MACRO_TRANSFORMERS_REGEX.match(spec, 1).groups()
    if not digits and not reverse and not delimiters:
        return value

    parts = _split(value, delimiters or DEFAULT_DELIMITERS)
    if reverse:
        parts.reverse()
    if digits:
        keep = int(digits)
        if keep < len(parts):
            parts = parts[len(parts) - keep :]
    # Rejoined with "." whatever the delimiters were (RFC 7208 § 7.3)
    return ".".join(parts)


def expand_macro(template: str, environment: Environment) -> str:
    """
    Expands the macros in a domain-spec or macro-string

    Literal characters are copied verbatim. ``%{...}`` macros are replaced
    by the value of the matching environment field, optionally split on a
    set of delimiters, reversed and truncated to the rightmost parts. A ``%``
    followed by any other character is replaced by that character, so ``%%``
    yields ``%``, ``%_`` yields ``_`` and ``%-`` yields ``-``. A ``%{``
    without a closing brace is copied as is.

    Args:
        template (str): The string to expand
        environment (Environment): The values to expand macros to

    Returns:
        str: The expanded string

    Raises:
        :exc:`spfparse.utils.SPFMacroLengthExceeded`
    """
    output = ""
    i = 0
    length = len(template)
    while i < length:
        ch = template[i]
        if ch != "%" or i + 1 >= length:
            output += ch
            i += 1
        elif template[i + 1] == "{":
            close = template.find("}", i + 2)
            if close == -1:
                output += "%{"
                i += 2
            else:
                output += _expand_macro_spec(template[i + 2 : close], environment)
                i = close + 1
        else:
            output += template[i + 1]
            i += 2
        output, output_length = bounded_copy(output, MACRO_EXPANSION_MAX_LEN - 1)
        if output_length >= MACRO_EXPANSION_MAX_LEN:
            raise SPFMacroLengthExceeded(
                f"Expanding {template} exceeds {MACRO_EXPANSION_MAX_LEN - 1} "
                "characters",
                data={"length": output_length},
            )
    logger.debug(f"Expanded {template} to {output}")
    return output
