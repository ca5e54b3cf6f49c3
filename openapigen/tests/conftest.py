import logging

import pytest


@pytest.fixture(autouse=True)
def reset_openapigen_logger():
    """Undo configure_logging() calls made by CLI tests."""
    yield
    logger = logging.getLogger("openapigen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
