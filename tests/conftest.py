"""Shared fixtures for SysTune tests."""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from cancellation import CancellationToken
from fakes import FakeCommandRunner, FakeConfigStore, FakeServiceController


@pytest.fixture
def store():
    return FakeConfigStore()


@pytest.fixture
def services():
    return FakeServiceController()


@pytest.fixture
def runner():
    return FakeCommandRunner()


@pytest.fixture
def token():
    return CancellationToken()
