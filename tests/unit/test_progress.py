#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for progress events."""

import pytest

from cmark_batch.progress import ProgressEvent


@pytest.mark.unit
def test_progress_event_creation():
    """Test ProgressEvent creation and string representation."""
    event = ProgressEvent(event_type="started", message="Rendering 10 documents", current=0, total=10)
    assert event.event_type == "started"
    assert event.current == 0
    assert event.total == 10
    assert str(event) == "[STARTED] Rendering 10 documents (0/10)"


@pytest.mark.unit
def test_progress_event_without_total():
    """Test string representation without a known total."""
    assert str(ProgressEvent(event_type="finished", message="Done")) == "[FINISHED] Done"


@pytest.mark.unit
def test_progress_event_metadata_is_per_instance():
    """Test that the default metadata dict is not shared."""
    first = ProgressEvent(event_type="item_done", message="a")
    first.metadata["index"] = 0

    assert ProgressEvent(event_type="item_done", message="b").metadata == {}
