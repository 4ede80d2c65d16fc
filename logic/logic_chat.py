import logging
import threading
from typing import Dict, Generator, List, Optional, Tuple

from agents.chat import ChatAgent, chat_agent
from agents.errors import GENERIC_ERROR_MESSAGE, AssistantError
from agents.prompt_checkin import CHAT_WELCOME_MESSAGE
from agents.stream_consumer import CHUNK
from models import ConversationMessage
from .interaction import InFlightGuard, SubmissionInProgress, drive

logger = logging.getLogger(__name__)


class ChatSession:
    """
    AI support chat. Messages are append-only for the life of the session;
    the streamed reply lives in streaming_message until it completes.
    """

    def __init__(self, agent: Optional[ChatAgent] = None):
        self.agent = agent or chat_agent
        self.messages: List[ConversationMessage] = []
        self.streaming_message = ""
        self._guard = InFlightGuard("chat")

    @property
    def history(self) -> Tuple[ConversationMessage, ...]:
        return tuple(self.messages)

    @property
    def loading(self) -> bool:
        return self._guard.busy

    def iter_send_chat_message(
        self,
        text: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> Generator[str, None, bool]:
        """
        Send one user message. Yields the partial reply after every delta
        and returns True when the assistant reply was appended.
        """
        text = (text or "").strip()
        if not text:
            return False

        try:
            with self._guard.acquire():
                return (yield from self._run_turn(text, cancel_event))
        except SubmissionInProgress as e:
            logger.info("%s", e)
            return False

    def _run_turn(self, text: str, cancel_event: Optional[threading.Event]) -> Generator[str, None, bool]:
        prior = list(self.messages)
        self.messages.append(ConversationMessage("user", text))
        try:
            for event in self.agent.iter_reply_events(prior, text, cancel_event=cancel_event):
                if event.kind == CHUNK:
                    self.streaming_message = event.text
                    yield self.streaming_message
                else:
                    self.messages.append(ConversationMessage("assistant", event.text))
        except AssistantError as e:
            logger.error("Chat turn failed: %s", e)
            self.messages.append(ConversationMessage("assistant", GENERIC_ERROR_MESSAGE))
            return False
        finally:
            self.streaming_message = ""
        return True

    def send_chat_message(self, text: str, on_update=None, cancel_event: Optional[threading.Event] = None) -> bool:
        return drive(self.iter_send_chat_message(text, cancel_event=cancel_event), on_update)


# ================== gradio glue ==================


def to_chatbot_messages(session: ChatSession) -> List[Dict[str, str]]:
    """Messages for gr.Chatbot(type="messages"), including the partial reply."""
    shown = [{"role": "assistant", "content": CHAT_WELCOME_MESSAGE}]
    shown.extend(m.to_dict() for m in session.messages)
    if session.streaming_message:
        shown.append({"role": "assistant", "content": session.streaming_message})
    return shown


def chat_send_action(user_input: str, session: ChatSession):
    """Streaming gradio callback: outputs state, cleared input, chatbot."""
    for _partial in session.iter_send_chat_message(user_input):
        yield session, "", to_chatbot_messages(session)
    yield session, "", to_chatbot_messages(session)
