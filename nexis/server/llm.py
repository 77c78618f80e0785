# server/llm.py
# ---------------------------------------------------------
# Nexis plan generation.
#
# Public helpers used by routes:
#   - make_plan_with_llm(payload, settings, client)
#
# Post-processing of the model answer:
#   - strip_code_fence(text)
#   - parse_model_output(text)
#   - drop_empty_tokenomics(plan)
# ---------------------------------------------------------

import json
import logging
import math
import re
from typing import Any, Optional, Union

import httpx

from .config import Settings
from .groq_client import (
    GroqError,
    GroqTransportError,
    completion_text,
    create_chat_completion,
)
from .prompts import build_messages
from .schemas import (
    CompletionRequest,
    ParsedPlan,
    PlanError,
    PlanIn,
    PlanOutcome,
    RawText,
)

logger = logging.getLogger(__name__)

TEMPERATURE = 0.3
GENERIC_FAILURE = "Failed to generate Nexis output."
MISSING_KEY = "Missing GROQ_API_KEY on server."

# -------------------------------------------------------------------
# Code fences
# -------------------------------------------------------------------

FENCE = "```"
_TAG_CHARS = "_-+."
_JSON_OPENERS = "{["

# scanner states
_TAG, _AFTER_TAG, _BODY = "tag", "after_tag", "body"


def strip_code_fence(text: str) -> str:
    """
    Remove a markdown fence wrapped around the whole answer.

    Only a fence at the very start of the (trimmed) text opens and only one
    at the very end closes. The word right after the opening fence is a
    language tag (any case) when it ends the line or runs straight into a
    JSON opener; otherwise it is kept as content.
    """
    s = (text or "").strip()
    if not s.startswith(FENCE):
        return s

    tag_start = len(FENCE)
    i = tag_start
    body_start = tag_start
    state = _TAG
    while state != _BODY:
        ch = s[i] if i < len(s) else ""
        if not ch:
            body_start, state = i, _BODY
        elif ch == "\n":
            body_start, state = i + 1, _BODY
        elif ch in _JSON_OPENERS:
            body_start, state = i, _BODY
        elif ch in " \t\r":
            state = _AFTER_TAG
            i += 1
        elif state == _TAG and (ch.isalnum() or ch in _TAG_CHARS):
            i += 1
        else:
            # not a tag, the line is content
            body_start, state = tag_start, _BODY

    body = s[body_start:].rstrip()
    if body.endswith(FENCE):
        body = body[: -len(FENCE)]
    return body.strip()


# -------------------------------------------------------------------
# Parsing
# -------------------------------------------------------------------

_NOT_APPLICABLE = re.compile(r"not applicable", re.IGNORECASE)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant: {name}")


def _finite_float(literal: str) -> Optional[float]:
    # out-of-range literals like 1e400 become null, as JSON.stringify does
    value = float(literal)
    return value if math.isfinite(value) else None


def drop_empty_tokenomics(plan: Any) -> Any:
    """
    Return plan without detailed_plan.tokenomics when every value in it
    says "not applicable". The input is left untouched.
    """
    if not isinstance(plan, dict):
        return plan
    detailed = plan.get("detailed_plan")
    if not isinstance(detailed, dict):
        return plan
    tok = detailed.get("tokenomics")
    if not isinstance(tok, dict):
        return plan

    if not all(isinstance(v, str) and _NOT_APPLICABLE.search(v) for v in tok.values()):
        return plan

    trimmed = {k: v for k, v in detailed.items() if k != "tokenomics"}
    return {**plan, "detailed_plan": trimmed}


def parse_model_output(content: str) -> Union[ParsedPlan, RawText]:
    cleaned = strip_code_fence(content)
    try:
        parsed = json.loads(
            cleaned, parse_float=_finite_float, parse_constant=_reject_constant
        )
    except ValueError:
        logger.info("[llm] model output is not JSON; returning raw text")
        return RawText(raw=cleaned)
    return ParsedPlan(plan=drop_empty_tokenomics(parsed))


# -------------------------------------------------------------------
# /nexis
# -------------------------------------------------------------------

def build_completion_request(payload: PlanIn, settings: Settings) -> CompletionRequest:
    return CompletionRequest(
        model=settings.groq_model,
        messages=build_messages(payload),
        temperature=TEMPERATURE,
    )


def make_plan_with_llm(
    payload: PlanIn,
    settings: Settings,
    client: httpx.Client,
) -> PlanOutcome:
    """
    Ask Groq for a project plan and post-process the answer.

    Expected failures come back as PlanError; an answer that is not JSON
    comes back as RawText so the caller still has something to show.
    """
    if not settings.has_api_key:
        logger.error("[llm] GROQ_API_KEY is not configured")
        return PlanError.of(500, MISSING_KEY)

    request = build_completion_request(payload, settings)

    try:
        data = create_chat_completion(
            request,
            api_key=settings.groq_api_key or "",
            api_url=settings.groq_api_url,
            client=client,
        )
    except GroqError as e:
        logger.error("[llm] Groq API error: status=%s body=%r", e.status_code, e.body)
        status_code = e.status_code if settings.propagate_upstream_status else 502
        return PlanError.of(
            status_code,
            "Groq API error",
            status=e.status_code,
            message=e.message,
            details=e.body,
        )
    except GroqTransportError:
        logger.exception("[llm] Groq request failed")
        return PlanError.of(500, GENERIC_FAILURE)

    raw = completion_text(data).strip()
    logger.info("[llm] Groq raw content (first 500 chars): %s", raw[:500])

    return parse_model_output(raw)
