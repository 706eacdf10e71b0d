import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from apps.core.metrics.services import round_half_up
from apps.core.records.errors import StudioError

logger = logging.getLogger(__name__)

HIGH_SCORE = 70
MEDIUM_SCORE = 40

PROMPT_TEMPLATE = """You are a lead scoring AI for an art studio. Score each lead from 0-100 based on conversion likelihood.

Consider:
- Status: "new" = moderate, "contacted" (follow-up) = high interest, "demo" = very high, "converted" = 100, "not-interested" (lost) = 0
- Course: "Professional" = higher value, "Advanced" = medium, "Basic" = standard
- Source: "Referral" = highest quality, "Walk-in" = good, "Website"/"Instagram" = moderate
- Notes: Look for urgency signals, objections, interest level
- Follow-up date proximity: closer = more urgent

Return a JSON array with objects: {{ "id": "<lead_id>", "score": <number 0-100>, "reason": "<1-line reason>" }}

Leads data:
{leads}"""


@dataclass(frozen=True)
class LeadScore:
    id: int
    score: int
    reason: str

    @property
    def tier(self):
        if self.score >= HIGH_SCORE:
            return 'high'
        if self.score >= MEDIUM_SCORE:
            return 'medium'
        return 'low'

    def as_dict(self):
        return {'id': self.id, 'score': self.score, 'reason': self.reason, 'tier': self.tier}


@dataclass
class ScoringOutcome:
    scores: list = field(default_factory=list)
    error: Optional[StudioError] = None


def _lead_summary(lead):
    return {
        'id': str(lead.id),
        'name': lead.name,
        'status': lead.status,
        'course': lead.course,
        'source': lead.source,
        'notes': lead.notes,
        'follow_up_date': lead.follow_up_date.isoformat() if lead.follow_up_date else None,
        'created_at': lead.created_at.isoformat() if lead.created_at else None,
    }


def build_scoring_prompt(leads):
    return PROMPT_TEMPLATE.format(leads=json.dumps([_lead_summary(lead) for lead in leads]))


def _clamp_score(value):
    if isinstance(value, bool):
        raise ValueError('score must be a number')
    return max(0, min(100, round_half_up(str(value))))


def parse_scores(raw_scores, leads):
    """Keep only well-formed entries for leads that were actually sent.

    Unknown ids, duplicates and entries without a numeric score are dropped.
    Scores are clamped into 0-100.
    """
    known = {str(lead.id): lead.id for lead in leads}
    parsed = {}
    for entry in raw_scores:
        if not isinstance(entry, dict):
            continue
        lead_id = known.get(str(entry.get('id')))
        if lead_id is None or lead_id in parsed:
            continue
        try:
            score = _clamp_score(entry.get('score'))
        except (ArithmeticError, TypeError, ValueError):
            continue
        parsed[lead_id] = LeadScore(id=lead_id, score=score, reason=str(entry.get('reason') or ''))
    dropped = len(raw_scores) - len(parsed)
    if dropped:
        logger.info('Dropped %s unusable score entries', dropped)
    return list(parsed.values())


def score_leads(leads, scorer) -> ScoringOutcome:
    """Ask ``scorer`` for lead scores; any failure yields no scores."""
    if not leads:
        return ScoringOutcome()
    try:
        raw_scores = scorer.score(build_scoring_prompt(leads))
    except StudioError as exc:
        logger.warning('Lead scoring unavailable: %s', exc.message)
        return ScoringOutcome(error=exc)
    return ScoringOutcome(scores=parse_scores(raw_scores or [], leads))
