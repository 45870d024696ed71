"""
Typed shapes for what the inference provider returns.

Raw JSON from the model is validated here and nowhere else: a payload that
does not fit raises ``AIResponseMalformed`` at the boundary instead of
leaking half-filled dicts into the resolvers.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from app.errors import AIResponseMalformed
from app.models.models import NAME_MAX_LENGTH, SEVERITIES

logger = logging.getLogger("pillgraph.ai.schemas")


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""


def _text_list(payload: dict, key: str) -> list[str]:
    value = payload.get(key)
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


def _long_text(value) -> str:
    """Models sometimes return the long analysis as an object of sections."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        return "\n\n".join(
            f"{k}:\n{v}".strip() for k, v in value.items() if isinstance(v, str) and v.strip()
        )
    if isinstance(value, list):
        return "\n".join(v.strip() for v in value if isinstance(v, str) and v.strip())
    return ""


@dataclass
class DrugAnalysis:
    """Single-drug analysis returned by the model."""
    name: str
    description: str
    category: str
    generic_name: str = ""
    side_effects: list[str] = field(default_factory=list)
    contraindications: list[str] = field(default_factory=list)
    dosage: str = ""
    analysis: str = ""

    @classmethod
    def from_payload(cls, payload) -> "DrugAnalysis":
        if not isinstance(payload, dict):
            raise AIResponseMalformed("AI drug analysis is not a JSON object.")
        name = _text(payload, "name")
        description = _text(payload, "description")
        category = _text(payload, "category")
        missing = [k for k, v in (("name", name), ("description", description), ("category", category)) if not v]
        if missing:
            raise AIResponseMalformed(
                f"AI drug analysis is missing required fields: {', '.join(missing)}"
            )
        generic_name = _text(payload, "genericName")
        too_long = [
            k for k, v in (("name", name), ("category", category), ("genericName", generic_name))
            if len(v) > NAME_MAX_LENGTH
        ]
        if too_long:
            raise AIResponseMalformed(
                f"AI drug analysis fields exceed {NAME_MAX_LENGTH} characters: {', '.join(too_long)}"
            )
        return cls(
            name=name,
            description=description,
            category=category,
            generic_name=generic_name,
            side_effects=_text_list(payload, "sideEffects"),
            contraindications=_text_list(payload, "contraindications"),
            dosage=_text(payload, "dosage"),
            analysis=_long_text(payload.get("aiAnalysis")),
        )

    def to_drug_fields(self) -> dict:
        return {
            "name": self.name,
            "generic_name": self.generic_name or None,
            "description": self.description,
            "category": self.category,
            "side_effects": list(self.side_effects),
            "contraindications": list(self.contraindications),
            "dosage": self.dosage or None,
            "ai_analysis": self.analysis or None,
            "source": "ai",
        }


@dataclass
class InteractionEntry:
    """One pairwise entry inside a batched interaction analysis."""
    drug1: str
    drug2: str
    interaction_type: str
    severity: str
    description: str
    recommendation: str

    @classmethod
    def from_payload(cls, payload) -> Optional["InteractionEntry"]:
        """Return None for entries that cannot be used; the batch survives."""
        if not isinstance(payload, dict):
            return None
        entry = cls(
            drug1=_text(payload, "drug1"),
            drug2=_text(payload, "drug2"),
            interaction_type=_text(payload, "interactionType"),
            severity=_text(payload, "severity").lower(),
            description=_text(payload, "description"),
            recommendation=_text(payload, "recommendation"),
        )
        if not all((entry.drug1, entry.drug2, entry.interaction_type,
                    entry.description, entry.recommendation)):
            return None
        if entry.severity not in SEVERITIES:
            return None
        if len(entry.interaction_type) > NAME_MAX_LENGTH:
            return None
        return entry

    def names_match(self, name_a: str, name_b: str) -> bool:
        """Unordered, case-insensitive name equality."""
        mine = {self.drug1.casefold(), self.drug2.casefold()}
        return len(mine) == 2 and mine == {name_a.strip().casefold(), name_b.strip().casefold()}

    def to_interaction_fields(self) -> dict:
        return {
            "interaction_type": self.interaction_type,
            "severity": self.severity,
            "description": self.description,
            "recommendation": self.recommendation,
            "source": "ai",
        }


@dataclass
class InteractionAnalysis:
    """Batched multi-drug analysis. overall_risk/summary are informational only."""
    entries: list[InteractionEntry] = field(default_factory=list)
    overall_risk: str = ""
    summary: str = ""
    rejected: int = 0

    @classmethod
    def from_payload(cls, payload) -> "InteractionAnalysis":
        if not isinstance(payload, dict):
            raise AIResponseMalformed("AI interaction analysis is not a JSON object.")
        raw = payload.get("interactions")
        if not isinstance(raw, list):
            raise AIResponseMalformed("AI interaction analysis has no 'interactions' array.")

        result = cls(overall_risk=_text(payload, "overallRisk"), summary=_text(payload, "summary"))
        for item in raw:
            entry = InteractionEntry.from_payload(item)
            if entry is None:
                result.rejected += 1
                continue
            result.entries.append(entry)
        if result.rejected:
            logger.warning("Dropped %d unusable AI interaction entries", result.rejected)
        return result
