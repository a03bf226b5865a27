"""
Study companion: reflective answers about the story passage.

The conversation itself lives in the visitor session; this module builds the
prompt from the story context and makes one completion call per question.
"""

from typing import List, Optional
import traceback

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from app.core.concurrency import (
    COMPANION_WIDGET,
    LLM_SEMAPHORE,
    widget_guard,
    with_concurrency_limit,
)
from app.core.config import settings
from app.core.logger_config import setup_logger
from app.models.chat_models import ChatMessage
from app.services.session_store import VisitorSession

logger = setup_logger(__name__)

FALLBACK_REPLY = (
    "I'm sorry, I couldn't reflect on that right now. "
    "Please take a moment and try asking again."
)

SYSTEM_PROMPT = """You are a warm, knowledgeable Bible study companion on a devotional website.
Help the reader reflect on the passage below with theological depth, historical context
and gentle personal application. Stay grounded in the text, quote scripture sparingly,
and keep answers under 250 words unless asked for more. Use short paragraphs.

Passage context:
{context}"""


class CompanionService:
    """Wraps the chat model used by the study companion."""

    def __init__(self, llm: Optional[ChatOpenAI] = None):
        self._llm = llm

    @property
    def llm(self) -> ChatOpenAI:
        if self._llm is None:
            self._llm = ChatOpenAI(
                openai_api_key=settings.OPENAI_API_KEY,
                model=settings.OPENAI_MODEL,
                temperature=settings.OPENAI_TEMPERATURE,
            )
            logger.info(f"Companion chat model initialized ({settings.OPENAI_MODEL})")
        return self._llm

    def build_messages(
        self,
        prompt: str,
        context: str,
        history: Optional[List[ChatMessage]] = None,
    ) -> List[BaseMessage]:
        messages: List[BaseMessage] = [SystemMessage(content=SYSTEM_PROMPT.format(context=context))]
        turns = settings.CHAT_HISTORY_TURNS
        if history and turns > 0:
            for msg in history[-turns * 2:]:
                if msg.role == "user":
                    messages.append(HumanMessage(content=msg.text))
                else:
                    messages.append(AIMessage(content=msg.text))
        messages.append(HumanMessage(content=prompt))
        return messages

    async def generate_reflective_content(
        self,
        prompt: str,
        context: str,
        history: Optional[List[ChatMessage]] = None,
    ) -> str:
        """Ask the model about the passage; provider failures yield FALLBACK_REPLY."""
        try:
            messages = self.build_messages(prompt, context, history)
            async with with_concurrency_limit(LLM_SEMAPHORE, "companion_reply"):
                response = await self.llm.ainvoke(messages)
            text = (response.content or "").strip()
            if not text:
                logger.warning("Companion model returned an empty reply")
                return FALLBACK_REPLY
            return text
        except Exception as e:
            logger.error(f"Companion reply failed: {e}")
            logger.debug(traceback.format_exc())
            return FALLBACK_REPLY

    async def send_message(self, session: VisitorSession, text: str) -> Optional[ChatMessage]:
        """
        Append the visitor's message, then the model's reply, to the session.

        Returns the reply, or None when ``text`` is blank (nothing is appended).
        Raises WidgetBusyError if a reply is already pending for this session.
        """
        if not text or not text.strip():
            return None

        async with widget_guard(session.busy, COMPANION_WIDGET):
            # Earlier turns only; the new question is added separately
            history = list(session.messages[1:])
            session.messages.append(ChatMessage(role="user", text=text))
            logger.info(f"Companion question from session {session.session_id} ({len(text)} chars)")

            reply_text = await self.generate_reflective_content(text, session.story.ai_context, history)
            reply = ChatMessage(role="model", text=reply_text)
            session.messages.append(reply)
            return reply


# Global companion instance; the chat model is created on first use
companion_service = CompanionService()
