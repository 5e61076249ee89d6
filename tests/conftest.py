"""Pytest configuration and fixtures for bedlib tests."""
import numpy as np
import pytest

from bedlib import Interner, OptionalFieldDecoder


@pytest.fixture
def interner():
    return Interner()


@pytest.fixture
def decoder(interner):
    return OptionalFieldDecoder(interner)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def full_columns():
    """One valid literal for each of the nine optional columns."""
    return ['geneA', '500', '-', '110', '190', 'on', '2', '40', '0']
