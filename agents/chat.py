import threading
from typing import Dict, Iterator, List, Optional, Sequence

from agents.base import OpenAIStyleClient
from agents.prompt_checkin import CHAT_SYSTEM_PROMPT
from agents.stream_consumer import StreamEvent, iter_stream_events, iter_text_events
from llm_config import (
    UI_TEST_MODE,
    LLM_BASE_URL,
    CHAT_MODEL_NAME,
)
from models import ConversationMessage


class ChatAgent:
    """AI support chat: streams one reply per user message."""

    def __init__(self, client: Optional[OpenAIStyleClient] = None, test_mode: Optional[bool] = None):
        self.client = client or OpenAIStyleClient(LLM_BASE_URL, CHAT_MODEL_NAME)
        self.test_mode = UI_TEST_MODE if test_mode is None else test_mode

    def build_messages(
        self,
        history: Sequence[ConversationMessage],
        user_text: str,
    ) -> List[Dict[str, str]]:
        messages: List[Dict[str, str]] = [{"role": "system", "content": CHAT_SYSTEM_PROMPT}]
        messages.extend(m.to_dict() for m in history)
        messages.append({"role": "user", "content": user_text})
        return messages

    def iter_reply_events(
        self,
        history: Sequence[ConversationMessage],
        user_text: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[StreamEvent]:
        if self.test_mode:
            yield from iter_text_events(["(UI test mode) ", f"You said: {user_text}"])
            return

        response = self.client.open_stream(self.build_messages(history, user_text))
        yield from iter_stream_events(response, cancel_event=cancel_event)


chat_agent = ChatAgent()
