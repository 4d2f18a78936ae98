"""Lesson chat assistant.

Keeps the conversation of one student about one lesson. The conversation
starts with a system message built from the lesson title and content; each
question and reply is appended in order and the full history is sent on
every turn.

The assistant is an aid: failures turn into a fixed apology reply and never
raise into the quiz flow.
"""

from __future__ import annotations

from typing import Protocol

import structlog

from classroom.llm.client import LLMError, LLMResponse, Message

logger = structlog.get_logger(__name__)

SYSTEM_PROMPT_TUTOR = (
    "You are a helpful tutor. The student is learning about {lesson_title}. "
    "The learning content is {lesson_content}"
)

EMPTY_REPLY = "Sorry, I couldn't generate a response."
ERROR_REPLY = "Sorry, there was an error processing your request."


class ChatClient(Protocol):
    """Anything that can complete a chat (``LLMClient`` in production)."""

    async def chat(self, messages: list[Message]) -> LLMResponse: ...


class TutorConversation:
    """Chat history about a lesson."""

    def __init__(self, lesson_title: str, lesson_content: str, client: ChatClient):
        self.lesson_title = lesson_title
        self.client = client
        self.messages: list[Message] = [
            Message(
                role="system",
                content=SYSTEM_PROMPT_TUTOR.format(
                    lesson_title=lesson_title,
                    lesson_content=lesson_content,
                ),
            )
        ]

    @property
    def visible_messages(self) -> list[Message]:
        """User and assistant turns (without the system prompt)."""
        return self.messages[1:]

    async def ask(self, text: str) -> str | None:
        """Send a student question and return the assistant reply.

        Blank input is ignored (returns None, history unchanged).
        """
        if not text.strip():
            return None

        self.messages.append(Message(role="user", content=text))
        try:
            response = await self.client.chat(list(self.messages))
            reply = response.content or EMPTY_REPLY
        except LLMError as e:
            logger.error("tutor_chat_failed", lesson_title=self.lesson_title, error=str(e))
            reply = ERROR_REPLY

        self.messages.append(Message(role="assistant", content=reply))
        return reply
