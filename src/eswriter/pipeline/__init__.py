"""Question-answering pipeline — Markup → Questions → Prompts → Answers.

The pipeline coordinates the request-level data flow:
1. Extract ordered questions from form markup
2. Compose one prompt per question from the caller's profile
3. Fan out completion calls under a shared deadline
4. Collect answers in question order

Components:
- AnswerOrchestrator: bounded, deadline-aware fan-out
"""

from eswriter.pipeline.orchestrator import AnswerOrchestrator

__all__ = ["AnswerOrchestrator"]
