import logging

from railease.utils.logging import get_logger, kv


def test_kv_quotes_values_with_spaces():
    assert kv(path="/api/assets", status=200, city="New Delhi", note=None) == (
        'path=/api/assets status=200 city="New Delhi" note=-'
    )


def test_child_loggers_share_one_namespace():
    logger = get_logger("services.assets")
    assert logger.name == "railease.services.assets"
    assert logging.getLogger("railease").handlers
