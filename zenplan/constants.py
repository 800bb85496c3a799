TASKS_KEY = "zenplan_tasks"
GOALS_KEY = "zenplan_goals"
MOODS_KEY = "zenplan_moods"
LAST_CELEBRATED_KEY = "zenplan_last_celebrated"
STREAK_KEY = "zenplan_streak"
LAST_STREAK_DATE_KEY = "zenplan_last_streak_date"
THEME_KEY = "zenplan_theme"

LOCAL_STORE_TABLE = "local_store"

TASK_STATUSES = ["pending", "completed", "not-completed"]
STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_NOT_COMPLETED = "not-completed"

REOPENED_PROGRESS = 50
FULL_PROGRESS = 100

MOODS = ["happy", "neutral", "tired"]
MOOD_CONTEXTS = ["completion", "failure"]
MOOD_PROMPT_COOLDOWN_MS = 5 * 60 * 1000
MOOD_EMOJI = {
    "happy": "😄",
    "neutral": "😐",
    "tired": "😴",
}
MOOD_INSIGHTS = {
    "happy": "🔥 You complete 30% more tasks when you're Happy!",
    "neutral": "⚡ Consistency is your superpower.",
    "tired": "😴 Rest is productive too. Take a break.",
}

USER_ROLES = ["user", "admin", "super_admin"]
ROLE_SUPER_ADMIN = "super_admin"

THEMES = ["light", "dark"]

HISTORY_WEEKS_BACK = 12
