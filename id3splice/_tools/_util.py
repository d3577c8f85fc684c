# Copyright 2015 Christoph Reiter
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import contextlib
import logging
import os
import signal
from collections.abc import Iterator
from types import FrameType


def setup_logging(verbose: bool) -> None:
    """Sends debug records of the library to stderr if verbose is set"""

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s:%(name)s: %(message)s")


class SignalHandler:
    """Turns SIGINT/SIGTERM (and SIGHUP) into SystemExit, except while
    a block() is active, where the exit is delayed until the block ends.
    """

    MESSAGE: str = "Aborted, no file written"

    _interrupted: bool
    _nosig: bool

    def __init__(self):
        self._interrupted = False
        self._nosig = False

    def init(self) -> None:
        _ = signal.signal(signal.SIGINT, self._handler)
        _ = signal.signal(signal.SIGTERM, self._handler)
        if os.name != "nt":
            _ = signal.signal(signal.SIGHUP, self._handler)

    def _handler(self, signum: int, frame: FrameType | None) -> None:
        self._interrupted = True
        if not self._nosig:
            raise SystemExit(self.MESSAGE)

    @contextlib.contextmanager
    def block(self) -> Iterator[None]:
        """Keeps signals from interrupting a write in progress"""

        self._nosig = True
        try:
            yield
        finally:
            self._nosig = False
        if self._interrupted:
            raise SystemExit("Aborted after writing")
