# Copyright 2020 Christoph Reiter
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

import os
import subprocess
import sys

import id3splice

import pytest

try:
    import flake8
except ImportError:
    flake8 = None

from .. import TestCase


@pytest.mark.quality
class TFlake8(TestCase):

    def test_all(self):
        assert flake8 is not None, "flake8 is missing"
        root = os.path.dirname(id3splice.__path__[0])
        # the config in setup.cfg is looked up relative to the cwd
        result = subprocess.run(
            [sys.executable, "-m", "flake8", "."], cwd=root,
            capture_output=True, text=True)
        errors = result.stdout.splitlines()
        if errors or result.returncode != 0:
            raise Exception("\n" + "\n".join(errors) + result.stderr)
