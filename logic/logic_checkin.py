import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Generator, Iterable, List, Optional

import gradio as gr

from agents.checkin import CheckInAgent, checkin_agent
from agents.errors import GENERIC_ERROR_MESSAGE, AssistantError
from agents.stream_consumer import CHUNK
from models import CheckInRecord, CheckInStep, Recommendations
from .interaction import InFlightGuard, SubmissionInProgress, drive

logger = logging.getLogger(__name__)

_EDITABLE_STEPS = [
    CheckInStep.SYMPTOMS,
    CheckInStep.THOUGHTS_EMOTIONS,
    CheckInStep.BEHAVIORS_ALTERNATIVES,
]


class CheckInOrchestrator:
    """
    Owns the state of the four-step check-in wizard.

    Steps 1-3 are plain forward/back navigation. Submitting from step 3
    streams the analysis and fetches the structured recommendations at
    the same time; only when both succeed does the wizard move to step 4.
    """

    def __init__(self, agent: Optional[CheckInAgent] = None):
        self.agent = agent or checkin_agent
        self.record = CheckInRecord()
        self.step = CheckInStep.SYMPTOMS
        self.analysis_text = ""
        self.recommendations = Recommendations.empty()
        self.error: Optional[AssistantError] = None
        self._guard = InFlightGuard("check-in")

    @property
    def loading(self) -> bool:
        return self._guard.busy

    # ---------- step 1-3 editing ----------

    def toggle_symptom(self, symptom: str) -> List[str]:
        if symptom in self.record.symptoms:
            self.record.symptoms.remove(symptom)
        else:
            self.record.symptoms.append(symptom)
        return list(self.record.symptoms)

    def set_symptoms(self, symptoms: Iterable[str]) -> List[str]:
        chosen: List[str] = []
        for s in symptoms or []:
            if s not in chosen:
                chosen.append(s)
        self.record.symptoms = chosen
        return list(chosen)

    def update_fields(
        self,
        thoughts: Optional[str] = None,
        emotions: Optional[str] = None,
        behaviors: Optional[str] = None,
        alternative_thoughts: Optional[str] = None,
    ) -> None:
        if thoughts is not None:
            self.record.thoughts = thoughts
        if emotions is not None:
            self.record.emotions = emotions
        if behaviors is not None:
            self.record.behaviors = behaviors
        if alternative_thoughts is not None:
            self.record.alternative_thoughts = alternative_thoughts

    def advance_step(self) -> CheckInStep:
        """Move forward among steps 1-3. Leaving step 3 needs submit_check_in()."""
        if self.step in _EDITABLE_STEPS[:-1]:
            self.step = _EDITABLE_STEPS[_EDITABLE_STEPS.index(self.step) + 1]
        return self.step

    def back_step(self) -> CheckInStep:
        if self.step in _EDITABLE_STEPS[1:]:
            self.step = _EDITABLE_STEPS[_EDITABLE_STEPS.index(self.step) - 1]
        return self.step

    # ---------- step 3 -> 4 ----------

    def iter_submit_check_in(
        self,
        cancel_event: Optional[threading.Event] = None,
    ) -> Generator[str, None, bool]:
        """
        Submit the check-in. Yields the streamed analysis text after every
        delta and returns True once step 4 is reached.

        On failure the wizard stays on step 3, the recommendations are left
        as they were and analysis_text holds the generic error message.
        """
        try:
            with self._guard.acquire():
                if self.step is not CheckInStep.BEHAVIORS_ALTERNATIVES:
                    raise ValueError("A check-in can only be submitted from step 3")
                return (yield from self._run_submission(cancel_event))
        except SubmissionInProgress as e:
            logger.info("%s", e)
            return False

    def _run_submission(self, cancel_event: Optional[threading.Event]) -> Generator[str, None, bool]:
        record = self.record.copy()
        self.analysis_text = ""
        self.error = None
        logger.info("Submitting check-in with %d symptom(s)", len(record.symptoms))

        # Recommendations run on a worker thread while the analysis streams.
        # Leaving the executor waits for that request, so both requests have
        # settled before the guard is released.
        try:
            with ThreadPoolExecutor(max_workers=1, thread_name_prefix="recommendations") as pool:
                future = pool.submit(self.agent.fetch_recommendations, record)
                for event in self.agent.iter_analysis_events(record, cancel_event=cancel_event):
                    self.analysis_text = event.text
                    if event.kind == CHUNK:
                        yield self.analysis_text
                recommendations = future.result()
        except AssistantError as e:
            logger.error("Check-in submission failed: %s", e)
            self.error = e
            self.analysis_text = GENERIC_ERROR_MESSAGE
            return False

        self.recommendations = recommendations
        self.step = CheckInStep.ANALYSIS
        logger.info("Check-in analysis complete (%d characters)", len(self.analysis_text))
        return True

    def submit_check_in(self, on_update=None, cancel_event: Optional[threading.Event] = None) -> bool:
        return drive(self.iter_submit_check_in(cancel_event=cancel_event), on_update)

    def reset_check_in(self) -> bool:
        """Start a new check-in. Ignored while a submission is running."""
        if self.loading:
            logger.warning("Cannot start a new check-in while one is being analyzed")
            return False
        self.record = CheckInRecord()
        self.step = CheckInStep.SYMPTOMS
        self.analysis_text = ""
        self.recommendations = Recommendations.empty()
        self.error = None
        return True


# ================== gradio glue ==================


def render_recommendations(recs: Recommendations) -> str:
    if recs.is_empty():
        return ""
    sections = [
        ("Mental Tools", recs.mental_tools),
        ("Exercises", recs.exercises),
        ("Resources", recs.resources),
    ]
    lines: List[str] = []
    for title, items in sections:
        lines.append(f"### {title}")
        if items:
            lines.extend(f"- {item}" for item in items)
        else:
            lines.append("_None suggested._")
        lines.append("")
    return "\n".join(lines).strip()


def render_checkin(orch: CheckInOrchestrator):
    """Outputs: state, the four step columns, analysis text, recommendations."""
    step_updates = [gr.update(visible=(orch.step is s)) for s in CheckInStep]
    return (
        orch,
        *step_updates,
        orch.analysis_text,
        render_recommendations(orch.recommendations),
    )


def _sync_inputs(orch, symptoms, thoughts, emotions, behaviors, alternative_thoughts):
    orch.set_symptoms(symptoms)
    orch.update_fields(
        thoughts=thoughts,
        emotions=emotions,
        behaviors=behaviors,
        alternative_thoughts=alternative_thoughts,
    )


def checkin_next_action(orch, symptoms, thoughts, emotions, behaviors, alternative_thoughts):
    _sync_inputs(orch, symptoms, thoughts, emotions, behaviors, alternative_thoughts)
    orch.advance_step()
    return render_checkin(orch)


def checkin_back_action(orch, symptoms, thoughts, emotions, behaviors, alternative_thoughts):
    _sync_inputs(orch, symptoms, thoughts, emotions, behaviors, alternative_thoughts)
    orch.back_step()
    return render_checkin(orch)


def checkin_submit_action(orch, symptoms, thoughts, emotions, behaviors, alternative_thoughts):
    """Streaming gradio callback for 'Get Analysis'."""
    _sync_inputs(orch, symptoms, thoughts, emotions, behaviors, alternative_thoughts)
    for _partial in orch.iter_submit_check_in():
        yield render_checkin(orch)
    yield render_checkin(orch)


def checkin_reset_action(orch):
    orch.reset_check_in()
    r = orch.record
    return render_checkin(orch) + (
        list(r.symptoms),
        r.thoughts,
        r.emotions,
        r.behaviors,
        r.alternative_thoughts,
    )
