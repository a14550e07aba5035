from __future__ import annotations

import logging

from hotel_listing.core.logging import configure_logging


def test_configure_logging_writes_log_file(tmp_path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging("debug", tmp_path / "logs")
        logging.getLogger("hotel_listing.test").debug("hello from the listing")
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.DEBUG
        content = (tmp_path / "logs" / "listing.log").read_text()
        assert "DEBUG | hotel_listing.test | hello from the listing" in content
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)


def test_configure_logging_without_directory_only_streams(tmp_path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging("warning")
        assert root.level == logging.WARNING
        assert not any(isinstance(handler, logging.FileHandler) for handler in root.handlers)
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
