"""
Settings and schema configuration tests
"""
from catalog.config import Settings, get_settings
from catalog.models import Attribute, DataType
from catalog.schemas.attribute import AttributeResponse
from catalog.schemas.category import BindingResponse, CategoryResponse


def test_settings_defaults():
    settings = get_settings()
    assert settings.DEFAULT_CURRENCY == "INR"
    assert settings.DEFAULT_PAGE_SIZE <= settings.MAX_PAGE_SIZE


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DEFAULT_PAGE_SIZE", "10")
    monkeypatch.setenv("default_currency", "USD")

    settings = Settings(_env_file=None)
    assert settings.DEFAULT_PAGE_SIZE == 10
    # names are case sensitive
    assert settings.DEFAULT_CURRENCY == "INR"


def test_response_schemas_read_orm_objects():
    for schema in (AttributeResponse, BindingResponse, CategoryResponse):
        assert schema.model_config["from_attributes"] is True

    attribute = Attribute(id=1, name="Color", data_type=DataType.TEXT, is_active=True)
    response = AttributeResponse.model_validate(attribute)
    assert response.name == "Color"
    assert response.data_type == DataType.TEXT


def test_logger_does_not_stack_handlers():
    from catalog.utils.logger import get_logger

    first = get_logger("catalog.tests.logging")
    second = get_logger("catalog.tests.logging")
    assert first is second
    assert len(second.handlers) == 1
    assert second.propagate is False


def test_log_level_override(monkeypatch):
    import logging

    from catalog.utils import logger as logger_module

    monkeypatch.setattr(logger_module.settings, "LOG_LEVEL", "warning")
    assert logger_module.log_level() == logging.WARNING

    monkeypatch.setattr(logger_module.settings, "LOG_LEVEL", None)
    monkeypatch.setattr(logger_module.settings, "DEBUG", True)
    assert logger_module.log_level() == logging.DEBUG
