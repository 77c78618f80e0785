# server/prompts.py
# ---------------------------------------------------------
# Prompt text sent to the completion endpoint.
#
#   - SYSTEM_PROMPT: fixed output schema + formatting rules
#   - build_user_prompt(payload): per-request idea summary
# ---------------------------------------------------------

from typing import List, Optional

from .schemas import ChatMessage, PlanIn

NOT_SPECIFIED = "Not specified"

SYSTEM_PROMPT = """
You are Nexis, a pragmatic builder's copilot that turns an idea into a shipped project.
Return ONLY valid JSON (no backticks, no prose) with:

{
  "executive_snapshot": {
    "goal": "...",
    "constraints": "...",
    "success_metric": "...",
    "assumptions": "..."
  },
  "detailed_plan": {
    "tokenomics": {
      "supply_design": "...",
      "distribution_strategy": "...",
      "vesting_and_unlocks": "...",
      "utility": "..."
    },
    "budget_allocation": {
      "development": "…%",
      "marketing": "…%",
      "partnerships": "…%",
      "community_incentives": "…%",
      "reserve": "…%"
    },
    "growth_strategy": {
      "short_term": "...",
      "long_term": "...",
      "channels": "...",
      "content_plan": "..."
    }
  },
  "next_actions": ["...","...","..."],
  "open_questions": ["...","...","..."]
}
Rules:
- Use percentages for budget_allocation (numbers + %).
- Be practical and specific. If info is missing, make reasonable assumptions and state them.
- If the project is not token-based, OMIT the "tokenomics" object entirely.
- Output MUST be valid JSON with double quotes only. No markdown fences, no commentary.
"""


def _or_default(value: Optional[str]) -> str:
    return value or NOT_SPECIFIED


def build_user_prompt(payload: PlanIn) -> str:
    return (
        "\n"
        f"Idea: {payload.idea or ''}\n"
        f"Audience: {_or_default(payload.audience)}\n"
        f"Budget: {_or_default(payload.budget)}\n"
        f"Timeline: {_or_default(payload.timeline)}\n"
        f"Goal (30 days): {_or_default(payload.goal)}\n"
    )


def build_messages(payload: PlanIn) -> List[ChatMessage]:
    return [
        ChatMessage(role="system", content=SYSTEM_PROMPT),
        ChatMessage(role="user", content=build_user_prompt(payload)),
    ]
