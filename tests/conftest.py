import pytest
from sqlalchemy import select

from fxquote.config.settings import Settings
from fxquote.database import make_session_factory, session_scope
from fxquote.models import CurrencyQuote

UPSTREAM_URL = "http://upstream.test/mock"


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite:///{tmp_path / 'app.db'}",
        "database_timeout_ms": 1000,
        "request_timeout_ms": 200,
        "upstream_url": UPSTREAM_URL,
        "upstream_token": "",
    }
    values.update(overrides)
    return Settings(**values)


def stored_rows(engine, bucket: str) -> list[float]:
    with session_scope(make_session_factory(engine)) as session:
        rows = session.execute(
            select(CurrencyQuote).where(CurrencyQuote.quote_date == bucket).order_by(CurrencyQuote.id)
        ).scalars()
        return [row.value for row in rows]


def insert_row(engine, bucket: str, value: float):
    with session_scope(make_session_factory(engine)) as session:
        session.add(CurrencyQuote(quote_date=bucket, value=value))


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)
