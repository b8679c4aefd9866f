# -*- coding: utf-8 -*-
"""Constant values"""

from __future__ import annotations
import os

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

__version__ = "1.0.0"

SYNTAX_ERROR_MARKER = "➞"
SPF_VERSION_TAG = "v=spf1"
DOMAIN_NAME_MAX_LEN = 255
DOMAIN_SPEC_MAX_LEN = 255
MACRO_EXPANSION_MAX_LEN = 512
MACRO_MAX_PARTS = 128
ERROR_CONTEXT_LEN = 16

env = os.environ

if "DOMAIN_NAME_MAX_LEN" in env:
    DOMAIN_NAME_MAX_LEN = int(env["DOMAIN_NAME_MAX_LEN"])
if "DOMAIN_SPEC_MAX_LEN" in env:
    DOMAIN_SPEC_MAX_LEN = int(env["DOMAIN_SPEC_MAX_LEN"])
if "MACRO_EXPANSION_MAX_LEN" in env:
    MACRO_EXPANSION_MAX_LEN = int(env["MACRO_EXPANSION_MAX_LEN"])
if "MACRO_MAX_PARTS" in env:
    MACRO_MAX_PARTS = int(env["MACRO_MAX_PARTS"])
if "ERROR_CONTEXT_LEN" in env:
    ERROR_CONTEXT_LEN = int(env["ERROR_CONTEXT_LEN"])
