import json

import pytest

from agents.checkin import CheckInAgent
from agents.chat import ChatAgent
from agents.errors import GENERIC_ERROR_MESSAGE, RequestFailed, StreamUnavailable, StructuredResponseInvalid
from agents.prompt_checkin import CHECKIN_ANALYSIS_PROMPT, RECOMMENDATIONS_SCHEMA
from conftest import FakeResponse, completion, delta, sse
from logic.interaction import drive
from logic.logic_chat import ChatSession
from logic.logic_checkin import (
    CheckInOrchestrator,
    checkin_next_action,
    checkin_reset_action,
    checkin_submit_action,
    render_recommendations,
)
from models import CheckInStep, ConversationMessage, Recommendations

RECS = {"mentalTools": ["Breathing"], "exercises": ["Walk"], "resources": ["Hotline"]}


@pytest.fixture
def orch(client):
    return CheckInOrchestrator(CheckInAgent(client=client, test_mode=False))


def fill_and_reach_step3(orch):
    orch.toggle_symptom("Anxiety")
    orch.advance_step()
    orch.update_fields(thoughts="t", emotions="e")
    orch.advance_step()
    orch.update_fields(behaviors="b", alternative_thoughts="a")
    assert orch.step is CheckInStep.BEHAVIORS_ALTERNATIVES


def queue_success(server, deltas=("Analysis", " complete."), recs=RECS):
    server.stream_responses.append(FakeResponse([sse(*[delta(d) for d in deltas], "[DONE]")]))
    server.json_responses.append(FakeResponse(body=completion(json.dumps(recs))))


def test_navigation_keeps_entered_data(orch):
    orch.toggle_symptom("Stress")
    assert orch.advance_step() is CheckInStep.THOUGHTS_EMOTIONS
    orch.update_fields(thoughts="what if it is serious")
    assert orch.advance_step() is CheckInStep.BEHAVIORS_ALTERNATIVES

    # leaving step 3 needs an explicit submit
    assert orch.advance_step() is CheckInStep.BEHAVIORS_ALTERNATIVES

    assert orch.back_step() is CheckInStep.THOUGHTS_EMOTIONS
    assert orch.back_step() is CheckInStep.SYMPTOMS
    assert orch.back_step() is CheckInStep.SYMPTOMS
    assert orch.record.symptoms == ["Stress"]
    assert orch.record.thoughts == "what if it is serious"


def test_toggle_symptom_has_set_semantics(orch):
    orch.toggle_symptom("Anxiety")
    orch.toggle_symptom("Fatigue")
    orch.toggle_symptom("Anxiety")
    assert orch.record.symptoms == ["Fatigue"]

    assert orch.set_symptoms(["Stress", "Stress", "Fatigue"]) == ["Stress", "Fatigue"]


def test_submit_end_to_end(server, orch):
    fill_and_reach_step3(orch)
    queue_success(server)
    updates = []

    assert orch.submit_check_in(on_update=updates.append) is True

    assert orch.step is CheckInStep.ANALYSIS
    assert orch.analysis_text == "Analysis complete."
    assert updates == ["Analysis", "Analysis complete."]
    assert orch.recommendations == Recommendations(
        mental_tools=("Breathing",), exercises=("Walk",), resources=("Hotline",)
    )
    assert not orch.loading

    analysis_req = server.stream_requests[0]
    assert analysis_req["messages"][0] == {"role": "system", "content": CHECKIN_ANALYSIS_PROMPT}
    assert "Symptoms: Anxiety" in analysis_req["messages"][1]["content"]
    assert "Alternative Thoughts: a" in analysis_req["messages"][1]["content"]
    assert server.structured_requests[0]["json_schema"] == RECOMMENDATIONS_SCHEMA


def test_missing_field_in_recommendations_keeps_step_three(server, orch):
    fill_and_reach_step3(orch)
    queue_success(server, recs={"mentalTools": ["Breathing"], "resources": ["Hotline"]})

    assert orch.submit_check_in() is False

    assert orch.step is CheckInStep.BEHAVIORS_ALTERNATIVES
    assert orch.recommendations == Recommendations.empty()
    assert orch.analysis_text == GENERIC_ERROR_MESSAGE
    assert isinstance(orch.error, StructuredResponseInvalid)
    assert orch.record.thoughts == "t"
    assert not orch.loading


def test_failed_stream_keeps_previous_recommendations(server, orch):
    fill_and_reach_step3(orch)
    previous = Recommendations(mental_tools=("Old tool",))
    orch.recommendations = previous
    server.stream_responses.append(FakeResponse(status_code=500))
    server.json_responses.append(FakeResponse(body=completion(json.dumps(RECS))))

    assert orch.submit_check_in() is False

    assert orch.step is CheckInStep.BEHAVIORS_ALTERNATIVES
    assert orch.recommendations is previous
    assert orch.analysis_text == GENERIC_ERROR_MESSAGE
    assert isinstance(orch.error, StreamUnavailable)


def test_failed_structured_request(server, orch):
    fill_and_reach_step3(orch)
    server.stream_responses.append(FakeResponse([sse(delta("Partial analysis"))]))
    server.json_responses.append(FakeResponse(status_code=429))

    assert orch.submit_check_in() is False

    assert orch.step is CheckInStep.BEHAVIORS_ALTERNATIVES
    assert orch.analysis_text == GENERIC_ERROR_MESSAGE
    assert isinstance(orch.error, RequestFailed)


def test_user_can_resubmit_after_failure(server, orch):
    fill_and_reach_step3(orch)
    server.stream_responses.append(FakeResponse(status_code=502))
    server.json_responses.append(FakeResponse(body=completion(json.dumps(RECS))))
    assert orch.submit_check_in() is False

    queue_success(server)
    assert orch.submit_check_in() is True
    assert orch.step is CheckInStep.ANALYSIS


def test_second_submission_rejected_while_in_flight(server, orch):
    fill_and_reach_step3(orch)
    queue_success(server)

    first = orch.iter_submit_check_in()
    assert next(first) == "Analysis"
    assert orch.loading

    assert orch.submit_check_in() is False
    assert len(server.stream_requests) == 1

    assert drive(first) is True
    assert orch.step is CheckInStep.ANALYSIS
    assert not orch.loading


def test_submit_outside_step_three_is_rejected(orch):
    with pytest.raises(ValueError):
        orch.submit_check_in()
    assert not orch.loading


def test_reset_clears_checkin_but_not_chat(server, client, orch):
    chat = ChatSession(ChatAgent(client=client, test_mode=False))
    chat.messages.append(ConversationMessage("user", "earlier question"))
    chat.messages.append(ConversationMessage("assistant", "earlier answer"))
    chat_before = chat.history

    fill_and_reach_step3(orch)
    queue_success(server)
    assert orch.submit_check_in() is True

    assert orch.reset_check_in() is True

    assert orch.step is CheckInStep.SYMPTOMS
    assert orch.record.is_empty()
    assert orch.analysis_text == ""
    assert orch.recommendations.is_empty()
    assert chat.history == chat_before


def test_reset_ignored_while_submitting(server, orch):
    fill_and_reach_step3(orch)
    queue_success(server)
    running = orch.iter_submit_check_in()
    next(running)

    assert orch.reset_check_in() is False
    assert orch.record.thoughts == "t"

    drive(running)


def test_ui_test_mode_needs_no_server():
    orch = CheckInOrchestrator(CheckInAgent(test_mode=True))
    orch.advance_step()
    orch.advance_step()

    assert orch.submit_check_in() is True
    assert orch.step is CheckInStep.ANALYSIS
    assert orch.analysis_text
    assert not orch.recommendations.is_empty()


def test_render_recommendations():
    recs = Recommendations(mental_tools=("Breathing",), exercises=(), resources=("Hotline",))
    text = render_recommendations(recs)

    assert "### Mental Tools\n- Breathing" in text
    assert "_None suggested._" in text
    assert render_recommendations(Recommendations.empty()) == ""


def test_gradio_actions_drive_the_wizard(server, orch):
    inputs = (["Anxiety"], "t", "e", "b", "a")
    out = checkin_next_action(orch, *inputs)
    assert out[0] is orch
    assert orch.step is CheckInStep.THOUGHTS_EMOTIONS
    checkin_next_action(orch, *inputs)
    queue_success(server)

    outputs = list(checkin_submit_action(orch, *inputs))

    final = outputs[-1]
    assert final[4]["visible"] is True
    assert final[5] == "Analysis complete."
    assert "- Breathing" in final[6]
    assert orch.record.alternative_thoughts == "a"

    reset = checkin_reset_action(orch)
    assert reset[1]["visible"] is True
    assert reset[-5:] == ([], "", "", "", "")
