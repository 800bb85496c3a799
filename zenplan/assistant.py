from __future__ import annotations

from dataclasses import dataclass, field

from zenplan.mutations import validate_title


@dataclass(frozen=True)
class GoalPlan:
    daily_plan: list[str] = field(default_factory=list)
    best_time: str = ""
    priority: list[str] = field(default_factory=list)


DEFAULT_PLAN = GoalPlan(
    daily_plan=[
        "Break the goal into small chunks.",
        "Dedicate 1 hour daily.",
        "Review progress at night.",
    ],
    best_time="10:00 AM - 12:00 PM",
    priority=["High Priority: Start immediately", "Consistency is key"],
)

KEYWORD_PLANS = [
    (
        ("code", "react", "project", "dev"),
        GoalPlan(
            daily_plan=[
                "Set up the project environment",
                "Code core features (Focus Mode)",
                "Debug and Refactor",
            ],
            best_time="08:00 AM - 11:00 AM (Deep Work)",
            priority=["1. Core Logic", "2. UI/UX", "3. Testing"],
        ),
    ),
    (
        ("gym", "workout", "fit", "loss"),
        GoalPlan(
            daily_plan=[
                "Warm-up for 10 mins",
                "High Intensity Training / Lifting",
                "Post-workout Nutrition",
            ],
            best_time="06:00 PM - 07:30 PM",
            priority=["Consistency", "Proper Form", "Recovery"],
        ),
    ),
    (
        ("study", "learn", "read"),
        GoalPlan(
            daily_plan=[
                "Read/Watch material for 45 mins",
                "Take notes using Active Recall",
                "Practice/Quiz for 15 mins",
            ],
            best_time="Early Morning (06:00 AM - 08:00 AM)",
            priority=["Understanding Concepts", "Daily Revision"],
        ),
    ),
]


def suggest_plan(goal: str) -> GoalPlan:
    """Pick a canned plan by the first keyword family the goal mentions."""
    lowered = validate_title(goal).lower()
    for keywords, plan in KEYWORD_PLANS:
        if any(keyword in lowered for keyword in keywords):
            return plan
    return DEFAULT_PLAN
