# Tests for the path checks run before a scan starts.

import logging

import pytest

gui = pytest.importorskip("gui")


class TestValidatePath:
    def test_valid_folder(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="gui"):
            assert gui.validate_path(str(tmp_path)) is None
        assert caplog.records == []

    def test_empty_path_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="gui"):
            error = gui.validate_path("")

        assert error == "Please enter or select a folder."
        assert [r.levelno for r in caplog.records] == [logging.WARNING]

    def test_missing_path_logged(self, tmp_path, caplog):
        missing = str(tmp_path / "missing")
        with caplog.at_level(logging.WARNING, logger="gui"):
            error = gui.validate_path(missing)

        assert error == f"Path does not exist: {missing}"
        assert caplog.records[0].levelno == logging.ERROR
        assert missing in caplog.text

    def test_file_path_logged(self, tmp_path, caplog):
        path = tmp_path / "file.txt"
        path.write_text("hello")
        with caplog.at_level(logging.WARNING, logger="gui"):
            error = gui.validate_path(str(path))

        assert error == "Path must be a folder."
        assert caplog.records[0].levelno == logging.ERROR
        assert str(path) in caplog.text
