# Copyright (c) 2018 Yubico AB
# All rights reserved.
#
#   Redistribution and use in source and binary forms, with or
#   without modification, are permitted provided that the following
#   conditions are met:
#
#    1. Redistributions of source code must retain the above copyright
#       notice, this list of conditions and the following disclaimer.
#    2. Redistributions in binary form must reproduce the above
#       copyright notice, this list of conditions and the following
#       disclaimer in the documentation and/or other materials provided
#       with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS
# FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE
# COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING,
# BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN
# ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

"""Print serialized device records in their diagnostic form."""

from __future__ import annotations

import argparse
import logging
import sys

from typing import List, NoReturn, Optional

from . import config
from .data import Device
from .exceptions import DecodeError


LOGGER = logging.getLogger("u2fserver.inspect")


def _configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m u2fserver",
        description="Inspect serialized U2F device records.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    inspect = commands.add_parser(
        "inspect", help="Print the diagnostic rendering of device records."
    )
    inspect.add_argument(
        "files", nargs="+", metavar="FILE", help="JSON record file, or - for stdin."
    )
    inspect.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Reject records with unknown fields.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(config.settings.log_level)

    status = 0
    for index, path in enumerate(args.files):
        try:
            device = Device.from_json(_read(path), strict=args.strict)
        except OSError as exc:
            LOGGER.error("Unable to read %s: %s", path, exc)
            status = 1
            continue
        except DecodeError as exc:
            LOGGER.error("Unable to decode %s: %s", path, exc)
            status = 1
            continue

        if index:
            print()
        print(device)
        LOGGER.debug("Decoded %r from %s", device, path)
    return status


def run() -> NoReturn:
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - CLI execution
    run()
