from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

Difficulty = Literal["beginner", "intermediate", "advanced"]


# --- conversation ---

class ConversationTurn(BaseModel):
    speaker: Literal["user", "ai"]
    message: str
    language: Literal["french", "english"]


class ConversationInput(BaseModel):
    user_message: str = Field(min_length=1, description="User message in French or English")
    conversation_history: List[ConversationTurn] = Field(default_factory=list)
    difficulty: Difficulty = "beginner"
    topic: Optional[str] = Field(default=None, description="e.g. restaurant, travel, hobbies")


class Correction(BaseModel):
    original: str
    corrected: str
    explanation: str


class VocabularyItem(BaseModel):
    french: str
    english: str
    usage: str


class ConversationOutput(BaseModel):
    response: str = Field(description="Reply in French")
    english_translation: str
    corrections: List[Correction]
    vocabulary: List[VocabularyItem]
    encouragement: str


# --- grammar ---

class ExplainGrammarInput(BaseModel):
    sentence: str = Field(min_length=1)


class ExplainGrammarOutput(BaseModel):
    explanation: str


# --- sentence generation ---

class GenerateSentenceInput(BaseModel):
    verb: str = Field(min_length=1, description="French verb to build sentences around")
    difficulty: Difficulty = "beginner"
    count: int = Field(default=3, ge=1, le=5)
    tense: Optional[str] = Field(default=None, description="e.g. présent, passé composé")


class GeneratedSentence(BaseModel):
    french: str
    english: str
    explanation: str
    difficulty: str


class GenerateSentenceOutput(BaseModel):
    sentences: List[GeneratedSentence]


# --- progress analysis ---

class ProgressAnalysisInput(BaseModel):
    correct_answers: int = Field(ge=0)
    total_attempts: int = Field(ge=0)
    struggling_verbs: List[str] = Field(default_factory=list)
    strong_verbs: List[str] = Field(default_factory=list)
    study_time_minutes: float = Field(ge=0)
    preferred_difficulty: Difficulty = "beginner"

    @property
    def accuracy_percent(self) -> int:
        if self.total_attempts <= 0:
            return 0
        return round(self.correct_answers / self.total_attempts * 100)


class Recommendation(BaseModel):
    type: Literal["study_focus", "practice_method", "difficulty_adjustment", "time_management"]
    title: str
    description: str
    priority: Literal["high", "medium", "low"]


class ProgressAnalysisOutput(BaseModel):
    overall_score: float = Field(ge=0, le=100)
    strengths: List[str]
    weaknesses: List[str]
    recommendations: List[Recommendation]
    next_session_focus: str
    motivational_message: str
