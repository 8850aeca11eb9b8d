"""Tests for editor tabs and language detection."""

from unittest.mock import Mock

import pytest

from remotedit.editor import TabManager, detect_language


class TestDetectLanguage:
    """Tests for detect_language."""

    @pytest.mark.parametrize(
        "filename,language",
        [
            ("main.py", "python"),
            ("App.TSX", "typescript"),
            ("index.js", "javascript"),
            ("lib.cc", "cpp"),
            ("README.md", "markdown"),
            ("notes.txt", "plaintext"),
        ],
    )
    def test_by_extension(self, filename, language):
        """Test the extension decides the language."""
        assert detect_language(filename) == language

    @pytest.mark.parametrize(
        "content,language",
        [
            ("#!/usr/bin/env python3\nprint(1)", "python"),
            ("#!/usr/bin/env node\n", "javascript"),
            ("#!/bin/bash\necho hi", "shell"),
            ("#!/bin/sh\n", "shell"),
            ("echo hi", "plaintext"),
        ],
    )
    def test_by_shebang(self, content, language):
        """Test files without an extension fall back to the shebang."""
        assert detect_language("run", content) == language


@pytest.fixture
def tabs():
    manager = TabManager()
    reader = Mock(side_effect=lambda path: f"content of {path}")
    manager.open("/w/a.py", reader)
    manager.open("/w/b.js", reader)
    manager.open("/w/c.md", reader)
    return manager


class TestTabManager:
    """Tests for TabManager."""

    def test_open_activates_new_tab(self, tabs):
        """Test the last opened tab is active."""
        assert tabs.active.path == "/w/c.md"
        assert tabs.active.language == "markdown"
        assert [t.name for t in tabs.tabs] == ["a.py", "b.js", "c.md"]

    def test_open_existing_reuses_tab(self, tabs):
        """Test reopening a file activates its tab without reading it again."""
        reader = Mock()
        tab = tabs.open("/w/a.py", reader)

        reader.assert_not_called()
        assert tabs.active is tab
        assert len(tabs.tabs) == 3

    def test_edit_marks_dirty(self, tabs):
        """Test changed content marks the tab dirty."""
        tabs.edit("/w/a.py", "content of /w/a.py")
        assert not tabs.get("/w/a.py").dirty

        tabs.edit("/w/a.py", "changed")
        assert tabs.get("/w/a.py").dirty

    def test_close_active_activates_right_neighbour(self, tabs):
        """Test closing the active middle tab moves to its right."""
        tabs.activate("/w/b.js")
        assert tabs.close("/w/b.js")
        assert tabs.active.path == "/w/c.md"

    def test_close_last_activates_left_neighbour(self, tabs):
        """Test closing the rightmost active tab moves left."""
        assert tabs.close("/w/c.md")
        assert tabs.active.path == "/w/b.js"

    def test_close_all(self, tabs):
        """Test no tab is active once all are closed."""
        for path in ["/w/a.py", "/w/b.js", "/w/c.md"]:
            tabs.close(path)
        assert tabs.active is None

    def test_close_dirty_asks_confirmation(self, tabs):
        """Test unsaved tabs stay open when the user declines."""
        tabs.edit("/w/a.py", "changed")
        confirm = Mock(return_value=False)

        assert tabs.close("/w/a.py", confirm) is False
        confirm.assert_called_once()
        assert tabs.get("/w/a.py") is not None

    def test_close_unknown(self, tabs):
        """Test closing a path without a tab."""
        assert tabs.close("/w/none") is False

    def test_save_active(self, tabs):
        """Test saving writes the content and clears dirty."""
        tabs.edit("/w/c.md", "# new")
        writer = Mock()

        tab = tabs.save_active(writer)

        writer.assert_called_once_with("/w/c.md", "# new")
        assert not tab.dirty

    def test_title(self, tabs):
        """Test the title shows the workspace, the file and a dirty marker."""
        assert tabs.title("/w") == "/w - /w/c.md"
        tabs.edit("/w/c.md", "x")
        assert tabs.title("/w") == "/w - /w/c.md *"
        assert TabManager().title(None) == "No folder opened"
