from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from lingualeap.contracts import Sentence

BLANK = "_______"


@dataclass(frozen=True)
class FlashcardWord:
    verb_source: str
    verb_target: str
    example: str


class FlashcardDeck:
    """One card per distinct French verb in the chunk, first occurrence wins."""

    def __init__(self, sentences: Sequence[Sentence]) -> None:
        seen: dict[str, FlashcardWord] = {}
        for s in sentences:
            if s.verb_source and s.verb_source not in seen:
                seen[s.verb_source] = FlashcardWord(
                    verb_source=s.verb_source,
                    verb_target=s.verb_target or "",
                    example=s.source_text,
                )
        self.cards: List[FlashcardWord] = list(seen.values())
        self.index = 0
        self.is_revealed = False
        self.learned: set[str] = set()

    @property
    def current(self) -> Optional[FlashcardWord]:
        if not self.cards:
            return None
        return self.cards[self.index]

    def next(self) -> None:
        if not self.cards:
            return
        self.is_revealed = False
        self.index = (self.index + 1) % len(self.cards)

    def prev(self) -> None:
        if not self.cards:
            return
        self.is_revealed = False
        self.index = (self.index - 1) % len(self.cards)

    def reveal(self) -> None:
        self.is_revealed = True

    def mark_learned(self) -> None:
        card = self.current
        if card is not None:
            self.learned.add(card.verb_source)


@dataclass(frozen=True)
class WordToken:
    id: str
    text: str


class SentenceBuilder:
    """Rebuild the French sentence from its shuffled words."""

    def __init__(self, sentence: Optional[Sentence], rng: Optional[random.Random] = None) -> None:
        self.sentence = sentence
        self.rng = rng or random.Random()
        self.original: List[WordToken] = []
        self.available: List[WordToken] = []
        self.constructed: List[WordToken] = []
        self.is_correct: Optional[bool] = None
        self.reset()

    @property
    def target(self) -> str:
        return " ".join(t.text for t in self.original)

    @property
    def attempt(self) -> str:
        return " ".join(t.text for t in self.constructed)

    def reset(self) -> None:
        words = self.sentence.source_text.split() if self.sentence is not None else []
        self.original = [WordToken(id=f"{w}-{i}", text=w) for i, w in enumerate(words)]
        self.available = list(self.original)
        self.rng.shuffle(self.available)
        self.constructed = []
        self.is_correct = None

    def pick(self, token_id: str) -> None:
        token = _take(self.available, token_id)
        self.constructed.append(token)
        self.is_correct = None

    def unpick(self, token_id: str) -> None:
        token = _take(self.constructed, token_id)
        self.available.append(token)
        self.is_correct = None

    def check(self) -> bool:
        self.is_correct = bool(self.original) and self.attempt == self.target
        return self.is_correct


def _take(tokens: List[WordToken], token_id: str) -> WordToken:
    for i, token in enumerate(tokens):
        if token.id == token_id:
            return tokens.pop(i)
    raise KeyError(token_id)


class FillInTheBlank:
    """Blank out the sentence's verb; available only if the verb appears verbatim."""

    def __init__(self, sentence: Optional[Sentence]) -> None:
        self.sentence = sentence
        self.blanked = ""
        self.answer = ""
        self.is_correct: Optional[bool] = None
        if sentence is None or not sentence.verb_source:
            return
        pattern = re.compile(rf"\b{re.escape(sentence.verb_source)}\b", re.IGNORECASE)
        if pattern.search(sentence.source_text):
            self.blanked = pattern.sub(BLANK, sentence.source_text)
            self.answer = sentence.verb_source

    @property
    def available(self) -> bool:
        return bool(self.answer)

    def check(self, user_answer: str) -> bool:
        if not self.available:
            raise ValueError("no fill-in-the-blank challenge for this sentence")
        self.is_correct = user_answer.strip().lower() == self.answer.strip().lower()
        return self.is_correct

    def reset(self) -> None:
        self.is_correct = None
