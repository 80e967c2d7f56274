"""
The four AI tools. Each takes a validated input model, renders a prompt,
and returns the validated output model from the hosted LLM.

These never touch playback; callers catch LLMFlowError and notify.
"""
from __future__ import annotations

import logging
import time

from lingualeap.app.logging_setup import log_event

from .base import LLMClient, LLMFlowError, T
from .schemas import (
    ConversationInput,
    ConversationOutput,
    ExplainGrammarInput,
    ExplainGrammarOutput,
    GenerateSentenceInput,
    GenerateSentenceOutput,
    ProgressAnalysisInput,
    ProgressAnalysisOutput,
)

_LEVEL_GUIDE = {
    "beginner": "Use simple present tense, basic vocabulary and short sentences.",
    "intermediate": "Use varied tenses, moderate vocabulary and longer sentences.",
    "advanced": "Use complex grammar, advanced vocabulary and natural expressions.",
}


def conversation_prompt(inp: ConversationInput) -> str:
    history = "\n".join(f"{t.speaker}: {t.message} ({t.language})" for t in inp.conversation_history)
    return (
        "You are Marie, a friendly French conversation partner for a language learner.\n"
        f"Learner level: {inp.difficulty}. {_LEVEL_GUIDE[inp.difficulty]}\n"
        f"Topic: {inp.topic or 'general conversation'}\n"
        f"Previous conversation:\n{history or '(none)'}\n"
        f'The learner said: "{inp.user_message}"\n'
        "Reply in French, gently correct mistakes, introduce one or two new words, "
        "ask a follow-up question and add a short encouragement."
    )


def grammar_prompt(inp: ExplainGrammarInput) -> str:
    return (
        "Explain the grammar of this French sentence clearly and concisely for a language learner.\n"
        f"Sentence: {inp.sentence}"
    )


def sentence_prompt(inp: GenerateSentenceInput) -> str:
    tense = f" Focus on the {inp.tense} tense." if inp.tense else ""
    return (
        f'Write {inp.count} practical French sentences using the verb "{inp.verb}" '
        f"at {inp.difficulty} level.{tense}\n"
        f"{_LEVEL_GUIDE[inp.difficulty]}\n"
        "For each sentence give an accurate English translation, a brief grammar note and "
        "a note on its difficulty."
    )


def progress_prompt(inp: ProgressAnalysisInput) -> str:
    return (
        "You are a language learning coach reviewing a French learner's progress.\n"
        f"Accuracy: {inp.correct_answers}/{inp.total_attempts} ({inp.accuracy_percent}%)\n"
        f"Study time: {inp.study_time_minutes:g} minutes\n"
        f"Level: {inp.preferred_difficulty}\n"
        f"Struggling with: {', '.join(inp.struggling_verbs) or '-'}\n"
        f"Strong with: {', '.join(inp.strong_verbs) or '-'}\n"
        "Give an overall score from 0 to 100, strengths, weaknesses, prioritized recommendations, "
        "a focus for the next session and a motivational message."
    )


def _run(
    client: LLMClient,
    flow: str,
    prompt: str,
    output_model: type[T],
    logger: logging.Logger | None,
) -> T:
    t0 = time.perf_counter()
    try:
        out = client.generate(prompt, output_model)
    except LLMFlowError as e:
        log_event(logger, logging.WARNING, "llm_flow_failed", flow=flow, provider=client.name, detail=str(e))
        raise
    ms = (time.perf_counter() - t0) * 1000.0
    log_event(logger, logging.INFO, "llm_flow_done", flow=flow, provider=client.name, ms=round(ms, 2))
    return out


def chat_with_ai(
    client: LLMClient, inp: ConversationInput, logger: logging.Logger | None = None
) -> ConversationOutput:
    return _run(client, "conversation", conversation_prompt(inp), ConversationOutput, logger)


def explain_grammar(
    client: LLMClient, inp: ExplainGrammarInput, logger: logging.Logger | None = None
) -> ExplainGrammarOutput:
    return _run(client, "grammar", grammar_prompt(inp), ExplainGrammarOutput, logger)


def generate_sentences(
    client: LLMClient, inp: GenerateSentenceInput, logger: logging.Logger | None = None
) -> GenerateSentenceOutput:
    out = _run(client, "sentences", sentence_prompt(inp), GenerateSentenceOutput, logger)
    if len(out.sentences) > inp.count:
        out = GenerateSentenceOutput(sentences=out.sentences[: inp.count])
    return out


def analyze_progress(
    client: LLMClient, inp: ProgressAnalysisInput, logger: logging.Logger | None = None
) -> ProgressAnalysisOutput:
    return _run(client, "progress", progress_prompt(inp), ProgressAnalysisOutput, logger)
