import os
import random
import sys

import numpy as np
import pytest

# Ensure the project root is on the module search path when the package is not
# installed. This allows ``import mobidlsim`` to succeed during test
# collection without requiring an editable installation.
ROOT_DIR = os.path.dirname(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)


class SequenceSource:
    """Uniform source replaying fixed values through ``random()``."""

    def __init__(self, values):
        self._values = list(values)
        self.calls = 0

    def random(self):
        value = self._values[self.calls % len(self._values)]
        self.calls += 1
        return value


@pytest.fixture(autouse=True)
def _set_seed():
    random.seed(1)


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def sequence_source():
    return SequenceSource
