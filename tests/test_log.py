#!/usr/bin/env python3
"""
Unit tests for the logging setup.
"""

import logging
import unittest

from gitlab_cli.log import LOGGER_NAME, setup_logging


class TestSetupLogging(unittest.TestCase):
    """Test cases for setup_logging."""

    def setUp(self):
        """Set up test fixtures."""
        self.logger = logging.getLogger(LOGGER_NAME)
        self.saved_handlers = self.logger.handlers[:]
        self.saved_level = self.logger.level
        self.logger.handlers = []

    def tearDown(self):
        """Clean up test fixtures."""
        self.logger.handlers = self.saved_handlers
        self.logger.setLevel(self.saved_level)

    def test_levels(self):
        """Test the levels selected by verbose and quiet."""
        self.assertEqual(setup_logging().level, logging.INFO)
        self.assertEqual(setup_logging(verbose=True).level, logging.DEBUG)
        self.assertEqual(setup_logging(quiet=True).level, logging.WARNING)
        self.assertEqual(setup_logging(verbose=True, quiet=True).level, logging.WARNING)

    def test_single_handler(self):
        """Test that repeated setup adds one console handler only."""
        logger = setup_logging()
        setup_logging(verbose=True)

        self.assertIs(logger, self.logger)
        self.assertEqual(len(logger.handlers), 1)
        self.assertIsInstance(logger.handlers[0], logging.StreamHandler)

    def test_existing_handler_kept(self):
        """Test that a handler configured elsewhere is left alone."""
        handler = logging.NullHandler()
        self.logger.addHandler(handler)

        logger = setup_logging(quiet=True)

        self.assertEqual(logger.handlers, [handler])
        self.assertEqual(logger.level, logging.WARNING)


if __name__ == '__main__':
    unittest.main(verbosity=2)
