# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any


@dataclass
class FakeMessage:
    """
    Stand-in for aiogram.types.Message: records every answer() call.
    """

    user_id: int
    text: str = ""
    answers: list[str] = field(default_factory=list)
    markups: list[Any] = field(default_factory=list)

    @property
    def from_user(self) -> SimpleNamespace:
        return SimpleNamespace(id=self.user_id)

    async def answer(self, text: str, reply_markup: Any = None, **kwargs: Any) -> None:
        self.answers.append(text)
        self.markups.append(reply_markup)


@dataclass
class FakeCallback:
    user_id: int
    data: str
    message: FakeMessage = field(init=False)
    alerts: list[tuple[str | None, bool]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.message = FakeMessage(user_id=self.user_id)

    @property
    def from_user(self) -> SimpleNamespace:
        return SimpleNamespace(id=self.user_id)

    async def answer(self, text: str | None = None, show_alert: bool = False, **kwargs: Any) -> None:
        self.alerts.append((text, show_alert))
