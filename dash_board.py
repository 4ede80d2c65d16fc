DASHBOARD_TXT = """
## 🧠 Mental Health Assistant

Welcome! This app helps you reflect on how you feel using short CBT-style check-ins,
and lets you ask an AI assistant questions about hypochondria and CBT tools.

---

### 🧭 How to use it

1. Open **Check-in** and pick the symptoms you noticed today.
2. Write down your thoughts and emotions.
3. Describe what you did, and try a more balanced, alternative thought.
4. Click **Get Analysis**: the analysis streams in, followed by suggested tools,
   exercises and resources.
5. Use **AI Support** for follow-up questions.

The assistant is not a therapist. For serious or persistent symptoms, please talk to a
qualified mental health professional.

Set `UI_TEST_MODE=1` (or start with `--mode test`) to try the UI without a model server.
"""

# Static informational pages: (navigation label, markdown body)
INFO_PANELS = [
    (
        "Mental Tools",
        """## Mental Tools

**Mindfulness Exercises**
Practice being present and aware with guided mindfulness sessions.

**Stress Management**
Learn effective techniques to manage and reduce stress levels.
""",
    ),
    (
        "Health Tracking",
        """## Health Tracking

**Sleep Log**
Track your sleep patterns and quality over time.

**Mood Journal**
Record and monitor your daily mood fluctuations.
""",
    ),
    (
        "Symptom Tracker",
        """## Symptom Tracker

**Physical Symptoms**
Monitor physical health symptoms and their patterns.

**Emotional Symptoms**
Track emotional states and their triggers.
""",
    ),
    (
        "CBT Exercises",
        """## CBT Exercises

**Thought Challenging**
Practice exercises to identify and challenge negative thought patterns.

**Behavioral Experiments**
Test your beliefs and assumptions with structured exercises.
""",
    ),
    (
        "CBT Tools",
        """## CBT Tools

**Thought Record**
Document and analyze your thoughts using a structured thought record template.

**Behavioral Activation**
Plan and track activities that can help improve your mood and energy levels.

**Cognitive Restructuring**
Learn to identify and challenge unhelpful thought patterns.

**Relaxation Techniques**
Access guided relaxation exercises and mindfulness practices.
""",
    ),
    (
        "Progress",
        """## Your Progress

Track your mental health journey with charts and insights.
""",
    ),
    (
        "Resources",
        """## Helpful Resources

**Educational Materials**
Learn about mental health, CBT, and coping strategies.

**Crisis Support**
Access emergency contacts and crisis helplines.
""",
    ),
    (
        "Community",
        """## Community Support

Connect with others on similar mental health journeys.
""",
    ),
]
