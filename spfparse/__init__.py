# -*- coding: utf-8 -*-

"""Parses SPF records and expands SPF macros"""

from __future__ import annotations

import spfparse._constants
from spfparse.environment import Environment
from spfparse.macro import expand_macro
from spfparse.record import (
    SPFErrorContext,
    SPFRecord,
    SPFSyntaxError,
    parse_spf_record,
    parse_txt_rdata,
)
from spfparse.serializer import render_record, render_term
from spfparse.terms import (
    A,
    All,
    Exists,
    Exp,
    Include,
    IP4,
    IP6,
    MX,
    Ptr,
    Qualifier,
    Redirect,
    Term,
    TermKind,
    Unknown,
)
from spfparse.utils import (
    SPFError,
    SPFMacroLengthExceeded,
    SPFNameTooLong,
    normalize_domain,
)

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


__version__ = spfparse._constants.__version__

__all__ = [
    "A",
    "All",
    "Environment",
    "Exists",
    "Exp",
    "IP4",
    "IP6",
    "Include",
    "MX",
    "Ptr",
    "Qualifier",
    "Redirect",
    "SPFError",
    "SPFErrorContext",
    "SPFMacroLengthExceeded",
    "SPFNameTooLong",
    "SPFRecord",
    "SPFSyntaxError",
    "Term",
    "TermKind",
    "Unknown",
    "expand_macro",
    "normalize_domain",
    "parse_spf_record",
    "parse_txt_rdata",
    "render_record",
    "render_term",
]
