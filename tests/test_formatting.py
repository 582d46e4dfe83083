"""Tests for console formatting helpers."""
import pytest
from rich.console import Console

from av1convert import formatting

from conftest import make_job

@pytest.fixture
def recorded(mocker):
    console = Console(record=True, width=80, color_system=None)
    mocker.patch.object(formatting, "console", console)
    return console

def test_status_symbols(recorded):
    formatting.print_check("ffmpeg found")
    formatting.print_warning("skipped b.mkv")
    formatting.print_error("conversion failed")
    formatting.print_info("Destination: /out")

    lines = recorded.export_text().splitlines()
    assert lines == [
        "✓ ffmpeg found",
        "⚠ skipped b.mkv",
        "✗ conversion failed",
        "ℹ Destination: /out",
    ]

def test_header_is_centered(recorded):
    formatting.print_header("av1convert", width=20)
    lines = recorded.export_text().splitlines()
    assert lines == ["=" * 20, "     av1convert", "=" * 20]

def test_queue_table_marks_unknown_frames(recorded):
    formatting.print_queue([make_job("/videos/A.mkv", "/out", frame_count=0)])
    text = recorded.export_text()
    assert "A.mkv" in text
    assert "unknown" in text
