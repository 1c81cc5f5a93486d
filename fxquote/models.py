"""
Database models for the FX quote gateway.
A single table holds one quote per time bucket.
"""
from sqlalchemy import Column, Float, Integer, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CurrencyQuote(Base):
    """A bid price recorded for one time bucket (calendar day or minute)."""
    __tablename__ = "currency"

    id = Column(Integer, primary_key=True, autoincrement=True)
    quote_date = Column(Text, index=True)
    value = Column(Float)

    def __repr__(self):
        return f"<CurrencyQuote(quote_date={self.quote_date}, value={self.value})>"
