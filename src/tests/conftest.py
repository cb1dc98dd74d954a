"""Shared fixtures for the Proxy Printer test suite."""

from typing import List

import pytest

from fakes import FakeLookup, RecordingAssembler
from proxy_printer.progress import ProgressEvent, ProgressReporter


@pytest.fixture
def lookup() -> FakeLookup:
    return FakeLookup()


@pytest.fixture
def reporter() -> ProgressReporter:
    return ProgressReporter()


@pytest.fixture
def events(reporter) -> List[ProgressEvent]:
    """Progress events received by ``reporter``, in order."""
    received: List[ProgressEvent] = []
    reporter.subscribe(received.append)
    return received


@pytest.fixture
def assembler() -> RecordingAssembler:
    return RecordingAssembler()

