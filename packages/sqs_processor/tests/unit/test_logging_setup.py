"""Tests for root logger configuration."""
from __future__ import annotations

import io
import json
import logging
import unittest

from sqs_processor.config.config import LoggingConfig
from sqs_processor.support.logging_setup import configure_logging, parse_level


class ConfigureLoggingTest(unittest.TestCase):
    def setUp(self) -> None:
        self.root = logging.getLogger()
        self.original_level = self.root.level

    def tearDown(self) -> None:
        for handler in list(self.root.handlers):
            if handler.get_name() == "sqs_processor":
                self.root.removeHandler(handler)
        self.root.setLevel(self.original_level)
        for name in ("botocore", "boto3", "urllib3", "s3transfer"):
            logging.getLogger(name).setLevel(logging.NOTSET)

    def test_text_format(self) -> None:
        stream = io.StringIO()
        configure_logging(LoggingConfig(level="info"), stream=stream)

        logging.getLogger("sqs_processor.test").info("hello %s", "world")

        output = stream.getvalue()
        self.assertIn(" - sqs_processor.test - INFO - hello world", output)

    def test_json_format(self) -> None:
        stream = io.StringIO()
        configure_logging(LoggingConfig(level="info", format="json"), stream=stream)

        logging.getLogger("sqs_processor.test").warning("queue %s unreachable", "q1")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        self.assertEqual(record["message"], "queue q1 unreachable")
        self.assertEqual(record["levelname"], "WARNING")
        self.assertEqual(record["name"], "sqs_processor.test")

    def test_reconfigure_replaces_handler(self) -> None:
        configure_logging(LoggingConfig(level="info"), stream=io.StringIO())
        configure_logging(LoggingConfig(level="error"), stream=io.StringIO())

        ours = [h for h in self.root.handlers if h.get_name() == "sqs_processor"]
        self.assertEqual(len(ours), 1)
        self.assertEqual(self.root.level, logging.ERROR)

    def test_aws_sdk_loggers_quiet_unless_debug(self) -> None:
        configure_logging(LoggingConfig(level="info"), stream=io.StringIO())
        self.assertEqual(logging.getLogger("botocore").level, logging.WARNING)

        configure_logging(LoggingConfig(level="trace"), stream=io.StringIO())
        self.assertEqual(logging.getLogger("botocore").level, logging.DEBUG)

    def test_parse_level(self) -> None:
        self.assertEqual(parse_level("trace"), logging.DEBUG)
        self.assertEqual(parse_level("WARN"), logging.WARNING)
        self.assertEqual(parse_level("error"), logging.ERROR)
        with self.assertRaises(ValueError):
            parse_level("loud")


if __name__ == "__main__":
    unittest.main()
