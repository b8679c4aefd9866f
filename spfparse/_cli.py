#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Parses an SPF record and expands SPF macros"""

from __future__ import annotations

import json
import logging
import sys
from argparse import ArgumentParser

from spfparse import (
    Environment,
    SPFError,
    __version__,
    expand_macro,
    parse_spf_record,
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


def _main():
    """Called when the module in executed"""
    arg_parser = ArgumentParser(description=__doc__)
    arg_parser.add_argument("record", help="the SPF record to parse")
    arg_parser.add_argument(
        "-d",
        "--domain",
        default="example.com",
        help="the domain the record is published on (default example.com)",
    )
    arg_parser.add_argument(
        "-e",
        "--expand",
        nargs="+",
        default=[],
        help="one or more macro-strings to expand",
    )
    arg_parser.add_argument("--sender", help="the MAIL FROM address")
    arg_parser.add_argument("--ip", help="the SMTP client IP address")
    arg_parser.add_argument("--helo", help="the HELO/EHLO domain")
    arg_parser.add_argument(
        "-f",
        "--format",
        default="json",
        help="specify JSON or text screen output format",
    )
    arg_parser.add_argument("-v", "--version", action="version", version=__version__)
    arg_parser.add_argument(
        "--debug", action="store_true", help="enable debugging output"
    )

    args = arg_parser.parse_args()

    logging_format = "%(asctime)s - %(levelname)s: %(message)s"
    logging.basicConfig(level=logging.WARNING, format=logging_format)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Debug output enabled")

    try:
        record = parse_spf_record(args.record, args.domain)
        environment = Environment()
        environment.set("d", record.domain)
        if args.sender:
            environment.set_sender(args.sender)
        if args.ip:
            environment.set_client_address(args.ip)
        if args.helo:
            environment.set("h", args.helo)
        expansions = {
            template: expand_macro(template, environment) for template in args.expand
        }
    except (SPFError, ValueError) as error:
        logging.error(str(error))
        sys.exit(1)

    if args.format.lower() == "text":
        print(record)
        for template, expansion in expansions.items():
            print(f"{template} -> {expansion}")
    else:
        results = record.to_dict()
        results["expansions"] = expansions
        print(json.dumps(results, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    _main()
