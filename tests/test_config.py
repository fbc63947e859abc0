"""Settings parsing, engine construction and logger plumbing."""
import logging

from myroom.config.settings import Settings
from myroom.core.logging import get_logger
from myroom.db.session import build_engine


def test_comma_separated_values_are_split():
    settings = Settings(
        BACKEND_CORS_ORIGINS="http://localhost:3000, https://myroom.example ",
        ALLOWED_FILE_EXTENSIONS=".JPG,png, ",
    )
    assert settings.CORS_ORIGINS == ["http://localhost:3000", "https://myroom.example"]
    assert settings.ALLOWED_EXTENSIONS == {"jpg", "png"}


def test_server_binding_is_left_to_the_runner():
    settings = Settings()
    assert not hasattr(settings, "HOST")
    assert not hasattr(settings, "PORT")


def test_sqlite_engine_skips_pool_sizing():
    engine = build_engine("sqlite://")
    try:
        assert engine.dialect.name == "sqlite"
        with engine.connect() as connection:
            assert connection.exec_driver_sql("select 1").scalar() == 1
    finally:
        engine.dispose()


def test_extra_fields_reach_the_record(caplog):
    caplog.set_level(logging.INFO, logger="myroom.tests")

    get_logger("myroom.tests").info("Live feed refused", extra={"path": "/api/v1/owner/listings/live"})

    record = caplog.records[-1]
    assert record.getMessage() == "Live feed refused"
    assert record.path == "/api/v1/owner/listings/live"
