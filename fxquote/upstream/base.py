from __future__ import annotations

from abc import ABC, abstractmethod

from fxquote.deadline import Deadline
from fxquote.schemas.quote import FetchOutcome


class QuoteFetcher(ABC):
    @abstractmethod
    async def fetch(self, url: str, token: str, deadline: Deadline, bucket_key: str) -> FetchOutcome:
        raise NotImplementedError

    async def aclose(self):
        return None
