import logging
import os
import time

from geodify.backend.handlers.logging_handler import LoggingHandler


def test_default_log_dir(isolated_home):
    handler = LoggingHandler()
    assert handler.log_dir == isolated_home / ".local" / "share" / "geodify" / "logs"
    assert handler.log_dir.is_dir()


def test_per_run_rotation_keeps_backups(tmp_path):
    handler = LoggingHandler(tmp_path)
    log = tmp_path / "geodify-cli.log"
    for run in range(7):
        log.write_text(f"run {run}")
        handler.rotate_log_for_logger(backup_count=5)
    assert not log.exists()
    assert (tmp_path / "geodify-cli.log.1").read_text() == "run 6"
    assert (tmp_path / "geodify-cli.log.5").read_text() == "run 2"
    assert not (tmp_path / "geodify-cli.log.6").exists()


def test_setup_logger_handlers(tmp_path):
    handler = LoggingHandler(tmp_path)
    logger = handler.setup_logger("geodify.test-setup")
    logger = handler.setup_logger("geodify.test-setup")
    try:
        kinds = sorted(type(h).__name__ for h in logger.handlers)
        assert kinds == ["RotatingFileHandler", "StreamHandler"]
        console = next(h for h in logger.handlers if type(h) is logging.StreamHandler)
        assert console.level == logging.ERROR
        handler.set_console_level(logger, logging.DEBUG)
        assert console.level == logging.DEBUG

        logger.warning("hello file")
        for h in logger.handlers:
            h.flush()
        assert "hello file" in (tmp_path / "geodify-cli.log").read_text()
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()


def test_cleanup_old_logs(tmp_path):
    handler = LoggingHandler(tmp_path)
    old = tmp_path / "old.log"
    new = tmp_path / "new.log"
    old.write_text("x")
    new.write_text("y")
    past = time.time() - 40 * 24 * 60 * 60
    os.utime(old, (past, past))
    handler.cleanup_old_logs(days=30)
    assert handler.get_log_files() == [new]
