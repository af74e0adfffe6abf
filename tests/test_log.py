"""
Tests for structured JSON logging.
"""
import json
import logging
from logging.handlers import RotatingFileHandler

from trellis.log import setup_logging


def file_handlers(logger):
    return [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]


class TestSetupLogging:

    def test_writes_json_lines(self, trellis_dir):
        logger = setup_logging(trellis_dir)
        logging.getLogger("trellis.activity").info(
            "Created EPIC 'Payments'", extra={"release_id": "r1", "item_ids": ["E1"]}
        )
        for handler in logger.handlers:
            handler.flush()

        lines = (trellis_dir / "trellis.log").read_text().strip().splitlines()
        entry = json.loads(lines[-1])
        assert entry["level"] == "INFO"
        assert entry["logger"] == "trellis.activity"
        assert entry["msg"] == "Created EPIC 'Payments'"
        assert entry["release_id"] == "r1"
        assert entry["item_ids"] == ["E1"]

    def test_repeated_setup_adds_one_handler(self, trellis_dir):
        setup_logging(trellis_dir)
        logger = setup_logging(trellis_dir)
        assert len(file_handlers(logger)) == 1

    def test_new_directory_replaces_handler(self, temp_dir):
        setup_logging(temp_dir / "one")
        logger = setup_logging(temp_dir / "two")
        handlers = file_handlers(logger)
        assert len(handlers) == 1
        assert handlers[0].baseFilename.endswith("two/trellis.log")

    def test_level_applied(self, trellis_dir):
        assert setup_logging(trellis_dir, "WARNING").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, trellis_dir):
        assert setup_logging(trellis_dir, "LOUD").level == logging.INFO

    def test_exception_text_included(self, trellis_dir):
        logger = setup_logging(trellis_dir)
        try:
            raise RuntimeError("disk full")
        except RuntimeError:
            logging.getLogger("trellis.managers").exception("Save failed")
        for handler in logger.handlers:
            handler.flush()

        entry = json.loads((trellis_dir / "trellis.log").read_text().strip().splitlines()[-1])
        assert entry["exception"] == "disk full"
