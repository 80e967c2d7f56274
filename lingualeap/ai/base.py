from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Type, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class LLMFlowError(RuntimeError):
    pass


class LLMClient(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def generate(self, prompt: str, output_model: Type[T], *, model: str | None = None) -> T:
        """Return output_model parsed and validated from the hosted model's JSON reply."""
