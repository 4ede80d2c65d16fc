import argparse
import os
import sys

_parser = argparse.ArgumentParser(add_help=False)
_parser.add_argument("--mode", type=str, default=None)
_args, _unknown = _parser.parse_known_args(sys.argv[1:])
if _args.mode == "test":
    # must be set before llm_config is imported
    os.environ["UI_TEST_MODE"] = "1"

import gradio as gr

from dash_board import DASHBOARD_TXT, INFO_PANELS
from llm_config import configure_logging
from logic.logic_chat import ChatSession, chat_send_action, to_chatbot_messages
from logic.logic_checkin import (
    CheckInOrchestrator,
    checkin_next_action,
    checkin_back_action,
    checkin_submit_action,
    checkin_reset_action,
)
from models import COMMON_SYMPTOMS

configure_logging()

PAGE_NAMES = ["Dashboard", "Check-in"] + [name for name, _ in INFO_PANELS] + ["AI Support"]


def switch_page(page_name: str):
    """Return visibility updates for all pages based on the active page name."""
    return tuple(gr.update(visible=(name == page_name)) for name in PAGE_NAMES)


with gr.Blocks(title="Mental Health Assistant") as demo:
    # Per-session state (callables are invoked once per browser session)
    checkin_state = gr.State(CheckInOrchestrator)
    chat_state = gr.State(ChatSession)

    gr.Markdown("# Mental Health Assistant")

    with gr.Row():
        # Left navigation
        with gr.Column(scale=1, min_width=180):
            gr.Markdown("### Navigation")
            nav_buttons = [gr.Button(name) for name in PAGE_NAMES]

        # Right content
        with gr.Column(scale=4):
            pages = []

            with gr.Column(visible=True) as page_dashboard:
                gr.Markdown(DASHBOARD_TXT)
            pages.append(page_dashboard)

            # Check-in
            with gr.Column(visible=False) as page_checkin:
                with gr.Column(visible=True) as step1:
                    gr.Markdown("## Your Mental Health Check-in")
                    symptoms_input = gr.CheckboxGroup(
                        label="Symptoms", choices=COMMON_SYMPTOMS, value=[]
                    )
                    step1_next = gr.Button("Next ➡")

                with gr.Column(visible=False) as step2:
                    gr.Markdown("## Your Thoughts and Emotions")
                    thoughts_input = gr.Textbox(
                        label="Thoughts", lines=4, placeholder="What are you thinking about?"
                    )
                    emotions_input = gr.Textbox(
                        label="Emotions", lines=4, placeholder="How are you feeling?"
                    )
                    with gr.Row():
                        step2_back = gr.Button("⬅ Back", variant="secondary")
                        step2_next = gr.Button("Next ➡")

                with gr.Column(visible=False) as step3:
                    gr.Markdown("## Your Behaviors and Alternative Thoughts")
                    behaviors_input = gr.Textbox(
                        label="Behaviors",
                        lines=4,
                        placeholder="What behaviors resulted from these thoughts and feelings?",
                    )
                    alternative_input = gr.Textbox(
                        label="Alternative thoughts",
                        lines=4,
                        placeholder="What could be alternative, more balanced thoughts?",
                    )
                    with gr.Row():
                        step3_back = gr.Button("⬅ Back", variant="secondary")
                        submit_btn = gr.Button("Get Analysis", variant="primary")

                with gr.Column(visible=False) as step4:
                    gr.Markdown("## Your Mental Health Analysis")
                    recommendations_md = gr.Markdown("")
                    gr.Markdown("Go check **AI Support** for follow-up questions.")
                    reset_btn = gr.Button("Start New Check-in 🔄")

                analysis_md = gr.Markdown("")
            pages.append(page_checkin)

            # Static info panels
            for _name, body in INFO_PANELS:
                with gr.Column(visible=False) as info_page:
                    gr.Markdown(body)
                pages.append(info_page)

            # AI support chat
            with gr.Column(visible=False) as page_chat:
                gr.Markdown("## AI Support Chat")
                chatbot = gr.Chatbot(
                    label="Conversation",
                    type="messages",
                    value=to_chatbot_messages(ChatSession()),
                    height=500,
                )
                with gr.Row():
                    chat_input = gr.Textbox(
                        label="Your message",
                        placeholder="Ask me anything about mental health...",
                        scale=4,
                    )
                    chat_send_btn = gr.Button("Send", scale=1)
            pages.append(page_chat)

    # ====== Event bindings ======

    # Navigation
    for button, name in zip(nav_buttons, PAGE_NAMES):
        button.click(lambda name=name: switch_page(name), inputs=None, outputs=pages)

    checkin_inputs = [
        checkin_state,
        symptoms_input,
        thoughts_input,
        emotions_input,
        behaviors_input,
        alternative_input,
    ]
    checkin_outputs = [
        checkin_state,
        step1,
        step2,
        step3,
        step4,
        analysis_md,
        recommendations_md,
    ]

    for btn in (step1_next, step2_next):
        btn.click(checkin_next_action, inputs=checkin_inputs, outputs=checkin_outputs)
    for btn in (step2_back, step3_back):
        btn.click(checkin_back_action, inputs=checkin_inputs, outputs=checkin_outputs)

    submit_btn.click(
        checkin_submit_action,
        inputs=checkin_inputs,
        outputs=checkin_outputs,
    )

    reset_btn.click(
        checkin_reset_action,
        inputs=[checkin_state],
        outputs=checkin_outputs
        + [symptoms_input, thoughts_input, emotions_input, behaviors_input, alternative_input],
    )

    # Chat: send via button or Enter
    for trigger in (chat_send_btn.click, chat_input.submit):
        trigger(
            chat_send_action,
            inputs=[chat_input, chat_state],
            outputs=[chat_state, chat_input, chatbot],
        )

if __name__ == "__main__":
    demo.queue().launch()
