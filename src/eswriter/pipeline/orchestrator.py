"""Orchestrator — fan-out of one completion task per question.

Every question gets its own task and its own pre-assigned slot, so tasks may
finish in any order while the output keeps document order. A semaphore caps
calls in flight; one deadline bounds the whole batch.

Per-task states:
    Pending → Dispatched → Completed | Failed | TimedOut

Usage:
    orchestrator = AnswerOrchestrator(client, max_concurrency=8)
    answers = await orchestrator.answer(questions, profile, Deadline.after(30))
    for a in answers:
        print(a.index, a.question, a.answer or "<empty>")
"""

import asyncio
import logging
from collections import Counter

from eswriter.clients.base import CompletionError, CompletionService, DeadlineExceededError
from eswriter.models import Answer, AnswerStatus, Deadline, Question, UserProfile
from eswriter.prompting import compose_prompt

logger = logging.getLogger(__name__)


class AnswerOrchestrator:
    """Answers a batch of questions concurrently under a shared deadline.

    Never fails the batch because of individual questions: a failed or timed
    out question leaves an empty answer in its slot.

    Args:
        client: Completion service shared by all tasks
        max_concurrency: Max completion calls in flight per batch
        cancel_grace: Seconds to wait for cancelled tasks after the deadline
        language: Prompt template language
    """

    def __init__(
        self,
        client: CompletionService,
        max_concurrency: int = 8,
        cancel_grace: float = 1.0,
        language: str = "ja",
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.client = client
        self.max_concurrency = max_concurrency
        self.cancel_grace = cancel_grace
        self.language = language

    async def answer(
        self,
        questions: list[Question],
        profile: UserProfile,
        deadline: Deadline,
    ) -> list[Answer]:
        """Answer every question, returning one Answer per question in order.

        Blocks until all tasks finish or the deadline passes. Tasks still
        running at the deadline are cancelled and awaited for at most
        ``cancel_grace`` seconds.

        Args:
            questions: Extracted questions, indexed 0..n-1
            profile: Caller's profile (read-only)
            deadline: Deadline shared by every task of this batch

        Returns:
            List with ``len(questions)`` answers where ``answers[i]`` answers ``questions[i]``
        """
        if not questions:
            return []

        loop = asyncio.get_running_loop()
        started = loop.time()
        # One slot per list position; only the task for position i writes slots[i]
        slots: list[Answer | None] = [None] * len(questions)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _answer_one(position: int, question: Question) -> None:
            prompt = compose_prompt(profile, question.text, self.language)
            async with semaphore:
                logger.debug("Dispatching question %d", position)
                try:
                    completion = await self.client.complete(deadline, prompt)
                except DeadlineExceededError as e:
                    logger.warning("Question %d timed out: %s", position, e)
                    slots[position] = _empty(question, position, AnswerStatus.TIMED_OUT)
                    return
                except CompletionError as e:
                    logger.warning(
                        "Question %d failed: %s (%s)",
                        position, e, type(e).__name__,
                    )
                    slots[position] = _empty(question, position, AnswerStatus.FAILED)
                    return
                except Exception as e:
                    logger.error("Question %d crashed: %s", position, e, exc_info=True)
                    slots[position] = _empty(question, position, AnswerStatus.FAILED)
                    return

            slots[position] = Answer(
                question=question.text,
                answer=completion.text,
                index=position,
                status=AnswerStatus.COMPLETED,
            )

        tasks = [
            asyncio.create_task(_answer_one(i, q), name=f"answer-{i}")
            for i, q in enumerate(questions)
        ]
        _, pending = await asyncio.wait(tasks, timeout=deadline.remaining())

        if pending:
            logger.warning("Deadline reached with %d/%d questions unanswered", len(pending), len(tasks))
            for task in pending:
                task.cancel()
            _, stuck = await asyncio.wait(pending, timeout=self.cancel_grace)
            if stuck:
                logger.error("%d completion tasks ignored cancellation", len(stuck))

        # Snapshot so a task that ignored cancellation cannot change the result
        answers = [
            slot if slot is not None else _empty(question, position, AnswerStatus.TIMED_OUT)
            for position, (question, slot) in enumerate(zip(questions, slots))
        ]

        counts = Counter(a.status.value for a in answers)
        logger.info(
            "Answered %d questions in %.2fs: %s",
            len(answers), loop.time() - started, dict(counts),
        )
        return answers


def _empty(question: Question, position: int, status: AnswerStatus) -> Answer:
    return Answer(question=question.text, answer="", index=position, status=status)
