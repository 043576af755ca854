import logging

from codemocklab.core.logger import LOGGER_NAME, get_logger


def test_module_loggers_are_not_double_prefixed():
    module_logger = get_logger("codemocklab.services.llm_client")

    assert module_logger.name == "codemocklab.services.llm_client"
    assert module_logger.parent is logging.getLogger(LOGGER_NAME)


def test_foreign_names_are_nested_under_the_app_logger():
    assert get_logger("main").name == "codemocklab.main"
    assert get_logger(LOGGER_NAME) is logging.getLogger(LOGGER_NAME)
