import logging

import structlog

from goap import GoapConfig
from utils.logging_utils import setup_logging, setup_logging_from_config


def teardown_function():
    structlog.reset_defaults()


def test_json_renderer_selected():
    setup_logging(level=logging.INFO, renderer="json")
    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)


def test_console_renderer_is_default():
    setup_logging()
    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


def test_level_filters_lower_levels():
    setup_logging(level=logging.WARNING, renderer="json")
    wrapper = structlog.get_config()["wrapper_class"]
    assert wrapper is structlog.make_filtering_bound_logger(logging.WARNING)


def test_setup_from_config():
    setup_logging_from_config(GoapConfig(log_level="ERROR", log_renderer="json"))
    config = structlog.get_config()
    assert config["wrapper_class"] is structlog.make_filtering_bound_logger(logging.ERROR)
    assert isinstance(config["processors"][-1], structlog.processors.JSONRenderer)
