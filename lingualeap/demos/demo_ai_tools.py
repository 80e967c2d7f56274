from __future__ import annotations

import argparse

from lingualeap.ai.base import LLMFlowError
from lingualeap.ai.factory import get_llm_client
from lingualeap.ai.flows import analyze_progress, chat_with_ai, explain_grammar, generate_sentences
from lingualeap.ai.schemas import (
    ConversationInput,
    ExplainGrammarInput,
    GenerateSentenceInput,
    ProgressAnalysisInput,
)


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--provider", default=None, help="gemini (or set LINGUALEAP_LLM_PROVIDER)")
    ap.add_argument("--model", default=None)
    sub = ap.add_subparsers(dest="tool", required=True)

    p = sub.add_parser("grammar")
    p.add_argument("sentence")

    p = sub.add_parser("sentences")
    p.add_argument("verb")
    p.add_argument("--difficulty", default="beginner", choices=["beginner", "intermediate", "advanced"])
    p.add_argument("--count", type=int, default=3)
    p.add_argument("--tense", default=None)

    p = sub.add_parser("chat")
    p.add_argument("message")
    p.add_argument("--difficulty", default="beginner", choices=["beginner", "intermediate", "advanced"])
    p.add_argument("--topic", default=None)

    p = sub.add_parser("progress")
    p.add_argument("--correct", type=int, required=True)
    p.add_argument("--total", type=int, required=True)
    p.add_argument("--minutes", type=float, default=15.0)
    p.add_argument("--struggling", nargs="*", default=[])
    p.add_argument("--strong", nargs="*", default=[])

    args = ap.parse_args()
    client = get_llm_client(args.provider, args.model)

    try:
        if args.tool == "grammar":
            out = explain_grammar(client, ExplainGrammarInput(sentence=args.sentence))
            print(out.explanation)
        elif args.tool == "sentences":
            gen = generate_sentences(
                client,
                GenerateSentenceInput(
                    verb=args.verb, difficulty=args.difficulty, count=args.count, tense=args.tense
                ),
            )
            for s in gen.sentences:
                print(f"- {s.french}\n  {s.english}\n  ({s.explanation})")
        elif args.tool == "chat":
            reply = chat_with_ai(
                client,
                ConversationInput(user_message=args.message, difficulty=args.difficulty, topic=args.topic),
            )
            print(reply.response)
            print(f"({reply.english_translation})")
            for c in reply.corrections:
                print(f"  * {c.original} -> {c.corrected}: {c.explanation}")
            print(reply.encouragement)
        else:
            report = analyze_progress(
                client,
                ProgressAnalysisInput(
                    correct_answers=args.correct,
                    total_attempts=args.total,
                    struggling_verbs=args.struggling,
                    strong_verbs=args.strong,
                    study_time_minutes=args.minutes,
                ),
            )
            print(f"[score] {report.overall_score}")
            for r in report.recommendations:
                print(f"- ({r.priority}) {r.title}: {r.description}")
            print(f"Next: {report.next_session_focus}")
            print(report.motivational_message)
    except LLMFlowError as e:
        print(f"[error] {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
