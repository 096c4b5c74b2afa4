"""Unit tests configuration file."""

import os

import pytest

SCHEMA_DIR = os.path.join(os.path.dirname(os.path.realpath(__file__)), "proto")


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def schema_file():
    """Path of the sample schema shared by the generator tests."""
    return os.path.join(SCHEMA_DIR, "pokeworld.proto")
