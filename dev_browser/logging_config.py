import logging
import sys

from dev_browser.config import CONFIG


def setup_logging(log_level: str | None = None, force_setup: bool = False) -> logging.Logger:
	"""Attach a stdout handler to the dev_browser logger and quiet the noisy third-party loggers.

	Args:
		log_level: Overrides DEV_BROWSER_LOGGING_LEVEL when given.
		force_setup: Replace handlers that were already installed.
	"""
	logger = logging.getLogger('dev_browser')
	if logger.handlers and not force_setup:
		return logger

	for handler in list(logger.handlers):
		logger.removeHandler(handler)

	level_name = (log_level or CONFIG.logging_level).upper()
	level = getattr(logging, level_name, logging.INFO)

	handler = logging.StreamHandler(sys.stdout)
	handler.setFormatter(logging.Formatter('%(levelname)-8s [%(name)s] %(message)s'))
	logger.addHandler(handler)
	logger.setLevel(level)
	logger.propagate = False

	for third_party in ('playwright', 'asyncio', 'websockets', 'cdp_use', 'cdp_use.client'):
		third_party_logger = logging.getLogger(third_party)
		third_party_logger.setLevel(logging.WARNING)

	logger.debug('dev_browser logging initialized at level %s', level_name)
	return logger
