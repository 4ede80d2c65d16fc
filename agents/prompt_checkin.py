CHECKIN_ANALYSIS_PROMPT = """You are a mental health AI assistant focused on helping with hypochondria and providing CBT tools.
Analyze the check-in data and provide a structured response.
Format the response with clear headings (Mental State Analysis, Recommended Tools, Suggested Exercises, Progress Tracking Focus, Relevant Resources) and use numbered lists and bullet points where appropriate to organize information effectively.
Restrict your responses to hypochondria and CBT-related information only. If any aspect falls outside this scope, advise the user to consult a professional.
"""

RECOMMENDATIONS_PROMPT = (
    "Based on the user's check-in data, provide specific recommendations for "
    "mental tools, exercises, and resources. Format as JSON."
)

CHAT_SYSTEM_PROMPT = """You are a mental health AI assistant focused on helping with hypochondria and providing CBT tools. Only answer questions related to these topics.
Respond in a well-structured format using numbered lists for key points and bullet points for supporting details.
If a question is outside your area of expertise, politely inform the user to consult a qualified mental health professional.
"""

CHAT_WELCOME_MESSAGE = (
    "Welcome! I'm here to help you with mental health questions and provide "
    "support. How can I assist you today?"
)

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

RECOMMENDATIONS_SCHEMA = {
    "name": "recommendations",
    "schema": {
        "type": "object",
        "properties": {
            "mentalTools": _STRING_LIST,
            "exercises": _STRING_LIST,
            "resources": _STRING_LIST,
        },
        "required": ["mentalTools", "exercises", "resources"],
        "additionalProperties": False,
    },
}

# Canned outputs for UI_TEST_MODE
DUMMY_ANALYSIS_DELTAS = [
    "Mental State Analysis\n",
    "This is a placeholder analysis (UI test mode). ",
    "No model was called.",
]

DUMMY_RECOMMENDATIONS = {
    "mentalTools": ["Thought record"],
    "exercises": ["Box breathing, 4 minutes"],
    "resources": ["Talk to a qualified mental health professional"],
}
