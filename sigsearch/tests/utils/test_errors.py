from __future__ import annotations

from sigsearch.utils import errors


def test_format_error_known_category_includes_suggestions():
    msg = errors.format_error("data", details="no shared genes")
    assert "Reference data cannot be searched: no shared genes" in msg
    assert "Suggestions" in msg


def test_format_error_unknown_category():
    msg = errors.format_error("unknown", details="x")
    assert msg.startswith("[unknown]")


def test_format_error_file_not_found_uses_path():
    msg = errors.format_error("file_not_found", path="/tmp/missing.h5")
    assert "File not found: /tmp/missing.h5" in msg


def test_render_cli_error(monkeypatch):
    captured = []

    class FakeLogger:
        def error(self, text):
            captured.append(text)

    monkeypatch.setattr(errors, "logger", FakeLogger())
    errors.render_cli_error("network_error", details="down")
    assert captured, "expected logger.error call"


def test_taxonomy_categories_and_render(monkeypatch):
    captured = []

    class FakeLogger:
        def error(self, text):
            captured.append(text)

    monkeypatch.setattr(errors, "logger", FakeLogger())
    exc = errors.InputError("unknown treatment 'x'")
    assert isinstance(exc, errors.SignatureSearchError)
    exc.render()
    assert "Invalid search input: unknown treatment 'x'" in captured[0]


def test_worker_error_carries_block_details():
    exc = errors.WorkerError("boom", block_index=3, entries=("a", "b"))
    assert exc.block_index == 3
    assert exc.entries == ["a", "b"]
    assert str(exc) == "boom"
