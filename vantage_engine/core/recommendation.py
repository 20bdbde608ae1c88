"""
Recommendation lifecycle module.

A Recommendation is the persisted record a realtor builds for an
investor, usually seeded from a RecommendationBundle. It moves through:

DRAFT → SENT → VIEWED → QUESTIONS → APPROVED | REJECTED
any non-superseded state → SUPERSEDED

Every change appends to the activity log.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .bundle import BundleSource, RecommendationBundle
from .counterfactual import Counterfactual

logger = logging.getLogger(__name__)


class RecommendationStatus(Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    VIEWED = "VIEWED"
    QUESTIONS = "QUESTIONS"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SUPERSEDED = "SUPERSEDED"


class RecommendationAction(Enum):
    """Actions that move a recommendation between states."""

    SEND = "send"
    ASK = "ask"
    APPROVE = "approve"
    REJECT = "reject"
    SUPERSEDE = "supersede"


class CreatedByRole(Enum):
    REALTOR = "realtor"
    OWNER = "owner"
    ADMIN = "admin"


_OPEN_TRANSITIONS = {
    RecommendationAction.SEND: RecommendationStatus.SENT,
    RecommendationAction.ASK: RecommendationStatus.QUESTIONS,
    RecommendationAction.APPROVE: RecommendationStatus.APPROVED,
    RecommendationAction.REJECT: RecommendationStatus.REJECTED,
    RecommendationAction.SUPERSEDE: RecommendationStatus.SUPERSEDED,
}

# Valid state transitions
VALID_TRANSITIONS: dict[RecommendationStatus, dict[RecommendationAction, RecommendationStatus]] = {
    RecommendationStatus.DRAFT: {
        RecommendationAction.SEND: RecommendationStatus.SENT,
        RecommendationAction.SUPERSEDE: RecommendationStatus.SUPERSEDED,
    },
    RecommendationStatus.SENT: dict(_OPEN_TRANSITIONS),
    RecommendationStatus.VIEWED: dict(_OPEN_TRANSITIONS),
    RecommendationStatus.QUESTIONS: dict(_OPEN_TRANSITIONS),
    RecommendationStatus.APPROVED: {
        RecommendationAction.SUPERSEDE: RecommendationStatus.SUPERSEDED,
    },
    RecommendationStatus.REJECTED: {
        RecommendationAction.SUPERSEDE: RecommendationStatus.SUPERSEDED,
    },
    RecommendationStatus.SUPERSEDED: {},
}


# Reached only through decide/supersede, never by patching status
_CLOSED_STATUSES = (
    RecommendationStatus.APPROVED,
    RecommendationStatus.REJECTED,
    RecommendationStatus.SUPERSEDED,
)


class InvalidTransitionError(Exception):
    """Raised when an action is not allowed from the current status."""

    def __init__(self, current: RecommendationStatus, action):
        self.current = current
        self.action = action
        name = action.value if isinstance(action, RecommendationAction) else action
        super().__init__(
            f"Cannot perform '{name}' from status '{current.value}'"
        )


class NotFoundError(LookupError):
    """Raised when a referenced question, counterfactual or record is missing."""


@dataclass
class ActivityEntry:
    """Record of something that happened to a recommendation."""

    at: datetime
    type: str
    label: str
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "at": self.at.isoformat(),
            "type": self.type,
            "label": self.label,
            "meta": dict(self.meta),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ActivityEntry":
        return cls(
            at=datetime.fromisoformat(data["at"]),
            type=data["type"],
            label=data["label"],
            meta=dict(data.get("meta") or {}),
        )


@dataclass
class QnaEntry:
    """Investor question and the realtor's answer."""

    qna_id: str
    question: str
    asked_at: datetime
    asked_by: str = "investor"
    draft_answer: Optional[str] = None
    final_answer: Optional[str] = None
    answered_at: Optional[datetime] = None
    answered_by: Optional[str] = None

    @property
    def is_answered(self) -> bool:
        return self.final_answer is not None

    def to_dict(self) -> dict:
        return {
            "qna_id": self.qna_id,
            "question": self.question,
            "asked_at": self.asked_at.isoformat(),
            "asked_by": self.asked_by,
            "draft_answer": self.draft_answer,
            "final_answer": self.final_answer,
            "answered_at": self.answered_at.isoformat() if self.answered_at else None,
            "answered_by": self.answered_by,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QnaEntry":
        answered_at = None
        if data.get("answered_at"):
            answered_at = datetime.fromisoformat(data["answered_at"])
        return cls(
            qna_id=data["qna_id"],
            question=data["question"],
            asked_at=datetime.fromisoformat(data["asked_at"]),
            asked_by=data.get("asked_by", "investor"),
            draft_answer=data.get("draft_answer"),
            final_answer=data.get("final_answer"),
            answered_at=answered_at,
            answered_by=data.get("answered_by"),
        )


@dataclass
class Decision:
    """Investor's decision on a recommendation."""

    outcome: RecommendationStatus  # APPROVED or REJECTED
    decided_at: datetime
    reason_tags: list[str] = field(default_factory=list)
    note: str = ""

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "decided_at": self.decided_at.isoformat(),
            "reason_tags": list(self.reason_tags),
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Decision":
        return cls(
            outcome=RecommendationStatus(data["outcome"]),
            decided_at=datetime.fromisoformat(data["decided_at"]),
            reason_tags=list(data.get("reason_tags") or []),
            note=data.get("note", ""),
        )


@dataclass
class PropertyNote:
    """Realtor note attached to a recommended property."""

    included_despite: Optional[str] = None
    rationale: str = ""

    def to_dict(self) -> dict:
        return {"included_despite": self.included_despite, "rationale": self.rationale}


@dataclass
class Recommendation:
    """
    Realtor recommendation for an investor.

    Tracks status, the recommended and excluded properties, investor
    Q&A and a full activity log.
    """

    # Identifiers
    recommendation_id: str
    investor_id: str
    created_by_role: CreatedByRole = CreatedByRole.REALTOR

    # Content
    title: str = "New recommendation"
    summary: str = ""
    status: RecommendationStatus = RecommendationStatus.DRAFT
    trigger: BundleSource = BundleSource.MANUAL

    property_ids: list[str] = field(default_factory=list)
    counterfactuals: list[Counterfactual] = field(default_factory=list)
    property_notes: dict[str, PropertyNote] = field(default_factory=dict)
    qna: list[QnaEntry] = field(default_factory=list)
    decision: Optional[Decision] = None
    superseded_by_id: Optional[str] = None

    # Timestamps
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    sent_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None

    # Audit trail
    activity: list[ActivityEntry] = field(default_factory=list)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def can_transition(self, action: RecommendationAction) -> bool:
        """Check if an action is valid from the current status."""
        return action in VALID_TRANSITIONS.get(self.status, {})

    def get_valid_actions(self) -> list[RecommendationAction]:
        return list(VALID_TRANSITIONS.get(self.status, {}).keys())

    def _transition(self, action: RecommendationAction) -> RecommendationStatus:
        if not self.can_transition(action):
            raise InvalidTransitionError(self.status, action)

        previous = self.status
        self.status = VALID_TRANSITIONS[previous][action]
        logger.debug(
            "Recommendation %s: %s -> %s",
            self.recommendation_id,
            previous.value,
            self.status.value,
        )
        return self.status

    def _record(self, type_: str, label: str, **meta: Any) -> None:
        now = datetime.now()
        self.activity.append(ActivityEntry(at=now, type=type_, label=label, meta=meta))
        self.last_activity_at = now
        self.updated_at = now

    @property
    def is_closed(self) -> bool:
        """Check if the investor has decided or the record was replaced."""
        return self.status in _CLOSED_STATUSES

    # ------------------------------------------------------------------
    # Property selection
    # ------------------------------------------------------------------

    def add_property(self, property_id: str) -> "Recommendation":
        """Add a property to the recommended list (no duplicates)."""
        if property_id not in self.property_ids:
            self.property_ids.append(property_id)
        self._record("property_added", "Added property to recommendation", property_id=property_id)
        return self

    def remove_property(self, property_id: str) -> "Recommendation":
        self.property_ids = [p for p in self.property_ids if p != property_id]
        self._record("property_removed", "Removed property from recommendation", property_id=property_id)
        return self

    def add_counterfactual_anyway(self, property_id: str) -> "Recommendation":
        """
        Move an excluded property into the recommended list.

        The top exclusion reason is kept on the property note so the
        override stays visible.

        Raises:
            NotFoundError: If the property is not a counterfactual here
        """
        cf = next((c for c in self.counterfactuals if c.property_id == property_id), None)
        if cf is None:
            raise NotFoundError(f"Property '{property_id}' is not a counterfactual of {self.recommendation_id}")

        if property_id not in self.property_ids:
            self.property_ids.append(property_id)
        self.counterfactuals = [c for c in self.counterfactuals if c.property_id != property_id]

        top_reason = cf.top_reason
        self.property_notes[property_id] = PropertyNote(
            included_despite=top_reason or "Excluded by policy",
            rationale="",
        )
        self._record(
            "added_anyway",
            "Added counterfactual property anyway",
            property_id=property_id,
            top_reason=top_reason,
        )
        return self

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def send(self) -> "Recommendation":
        """Send to the investor."""
        self._transition(RecommendationAction.SEND)
        self.sent_at = datetime.now()
        self._record("sent", "Sent to investor")
        return self

    def mark_viewed(self) -> "Recommendation":
        """Record an investor view; only a SENT recommendation becomes VIEWED."""
        if self.status == RecommendationStatus.SENT:
            self.status = RecommendationStatus.VIEWED
        self._record("viewed", "Investor viewed recommendation")
        return self

    def ask_question(self, question: str) -> QnaEntry:
        """Record an investor question and move to QUESTIONS."""
        self._transition(RecommendationAction.ASK)
        entry = QnaEntry(
            qna_id=f"qna-{uuid.uuid4().hex[:12]}",
            question=question,
            asked_at=datetime.now(),
        )
        self.qna.append(entry)
        self._record("question", "Investor asked a question", qna_id=entry.qna_id)
        return entry

    def _find_qna(self, qna_id: str) -> QnaEntry:
        for entry in self.qna:
            if entry.qna_id == qna_id:
                return entry
        raise NotFoundError(f"Question '{qna_id}' not found on {self.recommendation_id}")

    def save_draft_answer(self, qna_id: str, draft_answer: str) -> "Recommendation":
        entry = self._find_qna(qna_id)
        entry.draft_answer = draft_answer
        self._record("draft_answer", "Saved draft answer", qna_id=qna_id)
        return self

    def send_answer(self, qna_id: str, final_answer: str) -> "Recommendation":
        entry = self._find_qna(qna_id)
        entry.final_answer = final_answer
        entry.answered_at = datetime.now()
        entry.answered_by = "realtor"
        self._record("answer_sent", "Sent answer to investor", qna_id=qna_id)
        return self

    def decide(
        self,
        outcome: RecommendationStatus,
        reason_tags: Optional[list[str]] = None,
        note: str = "",
    ) -> "Recommendation":
        """
        Record the investor's decision.

        Raises:
            ValueError: If outcome is neither APPROVED nor REJECTED
            InvalidTransitionError: If the recommendation cannot be decided now
        """
        if outcome == RecommendationStatus.APPROVED:
            action = RecommendationAction.APPROVE
            label = "Investor approved recommendation"
        elif outcome == RecommendationStatus.REJECTED:
            action = RecommendationAction.REJECT
            label = "Investor rejected recommendation"
        else:
            raise ValueError(f"Decision outcome must be APPROVED or REJECTED, got {outcome.value}")

        self._transition(action)
        self.decision = Decision(
            outcome=outcome,
            decided_at=datetime.now(),
            reason_tags=list(reason_tags or []),
            note=note,
        )
        self._record("decision", label, reason_tags=self.decision.reason_tags, note=note)
        return self

    def supersede(self, new_recommendation_id: str) -> "Recommendation":
        """Mark as replaced by a newer recommendation."""
        if new_recommendation_id == self.recommendation_id:
            raise ValueError("A recommendation cannot supersede itself")
        self._transition(RecommendationAction.SUPERSEDE)
        self.superseded_by_id = new_recommendation_id
        self._record(
            "superseded",
            "Superseded by newer recommendation",
            new_recommendation_id=new_recommendation_id,
        )
        return self

    def update(
        self,
        title: Optional[str] = None,
        summary: Optional[str] = None,
        status: Optional[RecommendationStatus] = None,
        trigger: Optional[BundleSource] = None,
        property_notes: Optional[dict[str, PropertyNote]] = None,
    ) -> "Recommendation":
        """
        Patch editable fields; None leaves a field unchanged.

        Raises:
            InvalidTransitionError: If status is changed on a closed
                recommendation, or set to a closed status directly
        """
        if status is not None and status != self.status:
            if self.is_closed or status in _CLOSED_STATUSES:
                raise InvalidTransitionError(self.status, f"set status {status.value}")

        changed = []
        if title is not None:
            self.title = title
            changed.append("title")
        if summary is not None:
            self.summary = summary
            changed.append("summary")
        if status is not None and status != self.status:
            self.status = status
            changed.append("status")
        if trigger is not None:
            self.trigger = trigger
            changed.append("trigger")
        if property_notes is not None:
            self.property_notes = dict(property_notes)
            changed.append("property_notes")

        self._record("updated", "Updated recommendation", fields=changed)
        return self

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "recommendation_id": self.recommendation_id,
            "investor_id": self.investor_id,
            "created_by_role": self.created_by_role.value,
            "title": self.title,
            "summary": self.summary,
            "status": self.status.value,
            "trigger": self.trigger.value,
            "property_ids": list(self.property_ids),
            "counterfactuals": [c.to_dict() for c in self.counterfactuals],
            "property_notes": {pid: n.to_dict() for pid, n in self.property_notes.items()},
            "qna": [q.to_dict() for q in self.qna],
            "decision": self.decision.to_dict() if self.decision else None,
            "superseded_by_id": self.superseded_by_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "last_activity_at": (
                self.last_activity_at.isoformat() if self.last_activity_at else None
            ),
            "valid_actions": [a.value for a in self.get_valid_actions()],
            "activity": [a.to_dict() for a in self.activity],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Recommendation":
        """Create recommendation from dictionary representation."""
        rec = cls(
            recommendation_id=data["recommendation_id"],
            investor_id=data["investor_id"],
            created_by_role=CreatedByRole(data.get("created_by_role", "realtor")),
            title=data.get("title", "New recommendation"),
            summary=data.get("summary", ""),
            status=RecommendationStatus(data.get("status", "DRAFT")),
            trigger=BundleSource(data.get("trigger", "manual")),
            property_ids=list(data.get("property_ids") or []),
            counterfactuals=[Counterfactual.from_dict(c) for c in data.get("counterfactuals") or []],
            property_notes={
                pid: PropertyNote(
                    included_despite=n.get("included_despite"),
                    rationale=n.get("rationale", ""),
                )
                for pid, n in (data.get("property_notes") or {}).items()
            },
            qna=[QnaEntry.from_dict(q) for q in data.get("qna") or []],
            superseded_by_id=data.get("superseded_by_id"),
        )

        if data.get("decision"):
            rec.decision = Decision.from_dict(data["decision"])
        if data.get("created_at"):
            rec.created_at = datetime.fromisoformat(data["created_at"])
        if data.get("updated_at"):
            rec.updated_at = datetime.fromisoformat(data["updated_at"])
        if data.get("sent_at"):
            rec.sent_at = datetime.fromisoformat(data["sent_at"])
        if data.get("last_activity_at"):
            rec.last_activity_at = datetime.fromisoformat(data["last_activity_at"])

        rec.activity = [ActivityEntry.from_dict(a) for a in data.get("activity") or []]
        return rec


def _new_id() -> str:
    return f"rec-{uuid.uuid4().hex[:10]}"


def create_recommendation(
    investor_id: str,
    created_by_role: CreatedByRole = CreatedByRole.REALTOR,
    trigger: BundleSource = BundleSource.MANUAL,
    title: Optional[str] = None,
    summary: Optional[str] = None,
    property_ids: Optional[list[str]] = None,
    counterfactuals: Optional[list[Counterfactual]] = None,
) -> Recommendation:
    """
    Factory function to create a new draft recommendation.

    Returns:
        New Recommendation in DRAFT status with a "created" activity entry
    """
    rec = Recommendation(
        recommendation_id=_new_id(),
        investor_id=investor_id,
        created_by_role=created_by_role,
        title=title or "New recommendation",
        summary=summary or "",
        trigger=trigger,
        property_ids=list(property_ids or []),
        counterfactuals=list(counterfactuals or []),
    )
    rec._record("created", "Created recommendation")
    return rec


def create_draft_from_bundle(
    bundle: RecommendationBundle,
    created_by_role: CreatedByRole = CreatedByRole.REALTOR,
    title: Optional[str] = None,
    summary: Optional[str] = None,
) -> Recommendation:
    """Seed a draft recommendation from a bundle."""
    return create_recommendation(
        investor_id=bundle.investor_id,
        created_by_role=created_by_role,
        trigger=bundle.source,
        title=title,
        summary=summary,
        property_ids=bundle.recommended_ids,
        counterfactuals=list(bundle.counterfactuals),
    )
