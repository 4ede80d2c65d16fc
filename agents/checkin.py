import logging
import threading
from typing import Dict, Iterator, List, Optional

from agents.base import OpenAIStyleClient
from agents.prompt_checkin import (
    CHECKIN_ANALYSIS_PROMPT,
    RECOMMENDATIONS_PROMPT,
    RECOMMENDATIONS_SCHEMA,
    DUMMY_ANALYSIS_DELTAS,
    DUMMY_RECOMMENDATIONS,
)
from agents.stream_consumer import StreamEvent, iter_stream_events, iter_text_events
from llm_config import (
    UI_TEST_MODE,
    LLM_BASE_URL,
    ANALYSIS_MODEL_NAME,
)
from models import CheckInRecord, Recommendations

logger = logging.getLogger(__name__)


class CheckInAgent:
    """
    Talks to the LLM on behalf of the check-in wizard.

    Two requests are made per submitted check-in:
    - a streamed one for the readable analysis,
    - a structured one (json_schema) for the recommendation lists.
    """

    def __init__(self, client: Optional[OpenAIStyleClient] = None, test_mode: Optional[bool] = None):
        self.client = client or OpenAIStyleClient(LLM_BASE_URL, ANALYSIS_MODEL_NAME)
        self.test_mode = UI_TEST_MODE if test_mode is None else test_mode

    def build_analysis_messages(self, record: CheckInRecord) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": CHECKIN_ANALYSIS_PROMPT},
            {"role": "user", "content": record.summary_text()},
        ]

    def build_recommendations_messages(self, record: CheckInRecord) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": RECOMMENDATIONS_PROMPT},
            {"role": "user", "content": record.summary_text()},
        ]

    def iter_analysis_events(
        self,
        record: CheckInRecord,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[StreamEvent]:
        if self.test_mode:
            yield from iter_text_events(DUMMY_ANALYSIS_DELTAS)
            return

        response = self.client.open_stream(self.build_analysis_messages(record))
        yield from iter_stream_events(response, cancel_event=cancel_event)

    def fetch_recommendations(self, record: CheckInRecord) -> Recommendations:
        """
        Ask for the structured recommendations and validate them.
        Raises RequestFailed or StructuredResponseInvalid; never returns
        a partially filled object.
        """
        if self.test_mode:
            return Recommendations.from_payload(DUMMY_RECOMMENDATIONS)

        payload = self.client.chat_json(
            self.build_recommendations_messages(record),
            json_schema=RECOMMENDATIONS_SCHEMA,
            temperature=0.2,
        )
        recommendations = Recommendations.from_payload(payload)
        logger.info(
            "Received recommendations: %d tools, %d exercises, %d resources",
            len(recommendations.mental_tools),
            len(recommendations.exercises),
            len(recommendations.resources),
        )
        return recommendations


checkin_agent = CheckInAgent()
