# System prompt for task extraction
# Scales: urgency and importance are always one of low|medium|high
# Durations: whole minutes, 5 to 240
SYSTEM_PROMPT = """You are a productivity assistant. Extract actionable tasks from the user's input and respond with JSON only.

Respect the exact schema and keep urgency/importance values to low|medium|high.

Only respond with valid JSON, no other text."""

# User prompt; {input} is the raw text the user submitted
USER_PROMPT = """Convert the following raw input into structured tasks.

Input: "{input}"

Return JSON with this shape:
{{
    "tasks": [
        {{
            "task": string,
            "urgency": "low" | "medium" | "high",
            "importance": "low" | "medium" | "high",
            "estimated_time_minutes": number
        }}
    ]
}}

Rules:
- Split compound input into separate tasks
- Keep task names short and action-oriented
- Urgency is about time pressure: deadlines, today, people waiting
- Importance is about consequences: health, money, work, relationships
- estimated_time_minutes should be an integer between 5 and 240
- If the input contains no actionable tasks, return {{"tasks": []}}"""


def build_user_prompt(text: str) -> str:
    return USER_PROMPT.format(input=text)
