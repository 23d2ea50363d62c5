# app/services/esg_insights.py

import json
import logging
from typing import List, Optional

from openai import OpenAI

from app.config import get_settings
from app.schemas.esg import CategoryScore, ESGInsights, ESGScoreResult

logger = logging.getLogger(__name__)


INSIGHTS_SCHEMA = {
    "type": "object",
    "properties": {
        "overall": {
            "type": "string",
            "description": "Short narrative (3–5 sentences) summarising ESG performance.",
        },
        "environmental": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Environmental insights as bullet points.",
        },
        "social": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Social insights as bullet points.",
        },
        "governance": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Governance insights as bullet points.",
        },
    },
    "required": ["overall", "environmental", "social", "governance"],
    "additionalProperties": False,
}


def _get_client() -> Optional[OpenAI]:
    settings = get_settings()
    if not settings.openai_api_key:
        return None
    return OpenAI(api_key=settings.openai_api_key)


# ---------- Fallback (no OpenAI / API error) ----------

def _category_bullets(name: str, category: CategoryScore) -> List[str]:
    weakest = sorted(category.metrics.items(), key=lambda item: item[1].normalized_score)
    bullets = [
        f"{name} score is {category.score}/100 ({category.performance.lower()} against industry benchmarks)."
    ]

    if category.score >= 75:
        bullets.append(
            f"Maintain current {name.lower()} programmes and scale the practices that keep this category leading."
        )
    elif category.score >= 60:
        bullets.append(
            f"{name} practices are above average; set short-term, measurable milestones to close the remaining gaps."
        )
    else:
        bullets.append(
            f"{name} performance trails peers and needs a structured improvement programme."
        )

    if weakest and weakest[0][1].normalized_score < 70:
        metric, score = weakest[0]
        bullets.append(f"Prioritise {metric}, currently the weakest {name.lower()} metric ({score.normalized_score}/100).")

    return bullets


def fallback_insights(result: ESGScoreResult) -> ESGInsights:
    """
    Rule-based insights used when OpenAI is not configured or the call
    fails, so the dashboard still has content.
    """
    subject = result.company_id or "The company"
    overall = result.overall_score

    if overall >= 70:
        overall_txt = (
            f"{subject} shows strong ESG performance with an overall score of {overall} "
            f"({result.rating}). Focus can shift to targeted improvements and scaling best practices."
        )
    elif overall >= 50:
        overall_txt = (
            f"{subject} demonstrates moderate ESG performance with an overall score of {overall} "
            f"({result.rating}). Core structures are in place, with clear room to improve."
        )
    else:
        overall_txt = (
            f"{subject} has a weak ESG profile with an overall score of {overall} "
            f"({result.rating}). Material improvements are needed to meet investor and regulatory expectations."
        )

    scores = result.category_scores
    return ESGInsights(
        overall=overall_txt,
        environmental=_category_bullets("Environmental", scores.environmental),
        social=_category_bullets("Social", scores.social),
        governance=_category_bullets("Governance", scores.governance),
    )


# ---------- OpenAI-based ESG insights ----------

def _build_prompt(result: ESGScoreResult) -> str:
    scores = result.category_scores
    return f"""
You are an ESG analyst. You are given benchmarked ESG scores for a company.
Write concise, practical insights for an ESG dashboard.

Company: {result.company_id or "n/a"}
Industry: {result.industry}

Scores (0-100):
- Environmental (E): {scores.environmental.score} ({scores.environmental.performance})
- Social (S): {scores.social.score} ({scores.social.performance})
- Governance (G): {scores.governance.score} ({scores.governance.performance})
- Overall: {result.overall_score} (rating {result.rating})

Metric detail:
{json.dumps(result.category_scores.model_dump(by_alias=True), indent=2)}

Produce:
1. A short OVERALL narrative (3–5 sentences) for executives.
2. 3–5 Environmental bullets (practical, specific).
3. 3–5 Social bullets.
4. 3–5 Governance bullets.
    """.strip()


def generate_esg_insights(result: ESGScoreResult) -> ESGInsights:
    """
    Call an LLM to generate structured ESG insights for the dashboard.
    If OpenAI is not configured or the call fails, fall back to rule-based insights.
    """
    client = _get_client()
    if client is None:
        return fallback_insights(result)

    try:
        completion = client.chat.completions.create(
            model=get_settings().openai_model,
            messages=[
                {
                    "role": "system",
                    "content": "You are an expert ESG analyst. Always respond in valid JSON.",
                },
                {"role": "user", "content": _build_prompt(result)},
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {"name": "EsgInsights", "schema": INSIGHTS_SCHEMA, "strict": True},
            },
        )

        data = json.loads(completion.choices[0].message.content)

        return ESGInsights(
            overall=data.get("overall", ""),
            environmental=data.get("environmental") or [],
            social=data.get("social") or [],
            governance=data.get("governance") or [],
        )

    except Exception as exc:
        # Bad key, network or model error: the dashboard still gets content.
        logger.warning("OpenAI insights call failed, using rule-based insights: %s", exc)
        return fallback_insights(result)
