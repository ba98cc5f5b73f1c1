"""Canned ADHD coaching replies, mood check-ins and task breakdown steps.

Replies are chosen by keyword substring matching against fixed tables; the
first matching topic wins.
"""

import random
from typing import Iterable, List, Optional, Tuple

RESPONSES = {
    "focus": (
        "Try the Pomodoro technique! Work for 25 minutes, then take a 5-minute "
        "break. This helps maintain focus without overwhelming your brain."
    ),
    "productivity": (
        "Break large tasks into smaller, manageable chunks. Celebrate each small "
        "win - your brain loves those dopamine hits!"
    ),
    "motivation": (
        "Remember, progress isn't always linear. Some days are harder than "
        "others, and that's completely normal. You're doing great!"
    ),
    "tasks": (
        "Prioritize your tasks using the 'brain dump' method. Write everything "
        "down, then pick just 1-3 most important items for today."
    ),
    "overwhelmed": (
        "When feeling overwhelmed, try the 2-minute rule: if something takes "
        "less than 2 minutes, do it now. Otherwise, schedule it."
    ),
    "struggling": (
        "It's okay to have difficult days. Try some deep breathing: inhale for 4 "
        "counts, hold for 4, exhale for 6. You've got this!"
    ),
    "anxiety": (
        "Ground yourself with the 5-4-3-2-1 technique: 5 things you see, 4 you "
        "hear, 3 you touch, 2 you smell, 1 you taste."
    ),
}

DEFAULT_RESPONSES = (
    "I'm here to help you stay focused and productive! What's on your mind?",
    "Let's tackle this together! What would you like to work on?",
    "Your ADHD brain is unique and powerful. How can I support you today?",
    "Remember, different doesn't mean deficient. What's your biggest challenge right now?",
)

# Checked in order
KEYWORDS = (
    ("focus", ("focus", "concentrate")),
    ("tasks", ("task", "todo", "work")),
    ("overwhelmed", ("overwhelm", "too much")),
    ("struggling", ("struggle", "hard", "difficult")),
    ("anxiety", ("anxious", "worry", "stress")),
    ("motivation", ("motivat", "energy")),
    ("productivity", ("productiv",)),
)

BREAKDOWN_STEPS = (
    ("Research the topic", "Gather information and resources about the task"),
    ("Create an outline", "Structure the main points and subtopics"),
    ("Draft content", "Write the initial version based on the outline"),
    ("Review and revise", "Check for errors and improve the content"),
    ("Finalize and submit", "Make final adjustments and complete the task"),
)

MOOD_DURATIONS = {
    "energized": 45 * 60,
    "focused": 25 * 60,
    "neutral": 20 * 60,
    "struggling": 10 * 60,
}

MOOD_FEEDBACK = {
    "energized": "Great energy! Perfect time for challenging tasks.",
    "focused": "You're in the zone! Let's tackle some deep work.",
    "neutral": "Steady as she goes. A good time for routine tasks.",
    "struggling": "It's okay to have tough days. Let's start small.",
}


def match_topic(message: str) -> Optional[str]:
    lowered = message.lower()
    for topic, keywords in KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return topic
    return None


def reply_to(message: str, rng: Optional[random.Random] = None) -> Tuple[str, str]:
    """Return ``(topic, reply)``; unmatched messages get a random default."""
    topic = match_topic(message)
    if topic is not None:
        return topic, RESPONSES[topic]
    return "default", (rng or random).choice(DEFAULT_RESPONSES)


def suggest_for_mood(mood: str) -> Tuple[int, str]:
    """Suggested focus length in seconds and an encouraging message."""
    if mood not in MOOD_DURATIONS:
        raise ValueError(f"Unknown mood {mood!r}")
    return MOOD_DURATIONS[mood], MOOD_FEEDBACK[mood]


def _overlaps(title: str, existing: str) -> bool:
    title, existing = title.lower(), existing.lower()
    return existing in title or title in existing


def suggest_subtasks(existing_titles: Iterable[str]) -> List[Tuple[int, str, str]]:
    """Canned ``(order, title, description)`` steps for breaking a task down.

    Steps whose title contains, or is contained in, an existing subtask title
    (ignoring case) are left out. Blank titles never match.
    """
    existing = [title.strip() for title in existing_titles if title and title.strip()]
    return [
        (order, title, description)
        for order, (title, description) in enumerate(BREAKDOWN_STEPS, start=1)
        if not any(_overlaps(title, other) for other in existing)
    ]
