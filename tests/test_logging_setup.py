import logging
from logging.handlers import RotatingFileHandler

from whiteboard_api import logging_setup


def test_setup_logging_installs_rotating_file_handler(tmp_path, monkeypatch):
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        logging_setup.setup_logging(tmp_path / "logs")
        added = [h for h in root.handlers if h not in before]
        files = [h for h in added if isinstance(h, RotatingFileHandler)]
        assert len(files) == 1
        assert files[0].baseFilename == str(tmp_path / "logs" / "whiteboard.log")

        # second call is a no-op
        logging_setup.setup_logging(tmp_path / "other")
        assert [h for h in root.handlers if h not in before] == added
        assert not (tmp_path / "other").exists()
    finally:
        for h in root.handlers[:]:
            if h not in before:
                root.removeHandler(h)
                h.close()


def test_resolve_logs_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("LOGS_DIR", str(tmp_path / "abs"))
    assert logging_setup.resolve_logs_dir() == tmp_path / "abs"

    monkeypatch.setenv("LOGS_DIR", "var/logs")
    assert logging_setup.resolve_logs_dir() == logging_setup._ROOT / "var" / "logs"

    monkeypatch.delenv("LOGS_DIR")
    assert logging_setup.resolve_logs_dir().name == "logs"
    assert logging_setup.resolve_logs_dir().is_absolute()
