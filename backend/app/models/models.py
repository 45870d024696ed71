"""
SQLAlchemy ORM models – the Record Store's two collections.
Interaction pairs are stored with drug1_id < drug2_id so the unique
constraint covers both orderings of the same pair.
"""

from datetime import datetime, timezone

from app.database import db

DRUG_SOURCES = ("manual", "ai")
INTERACTION_SOURCES = ("database", "ai")
SEVERITIES = ("low", "medium", "high")
NAME_MAX_LENGTH = 255


def _utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class Drug(db.Model):
    __tablename__ = "drugs"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    # Unique constraint is case-sensitive; lookups are case-insensitive.
    name = db.Column(db.String(NAME_MAX_LENGTH), nullable=False, unique=True, index=True)
    generic_name = db.Column(db.String(NAME_MAX_LENGTH), index=True)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(NAME_MAX_LENGTH), nullable=False, index=True)
    side_effects = db.Column(db.JSON, nullable=False, default=list)
    contraindications = db.Column(db.JSON, nullable=False, default=list)
    dosage = db.Column(db.Text)
    ai_analysis = db.Column(db.Text)
    source = db.Column(db.String(20), nullable=False, default="manual")
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("source IN ('manual', 'ai')", name="ck_drugs_source"),
    )

    @property
    def is_ai_generated(self) -> bool:
        return self.source == "ai"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "genericName": self.generic_name,
            "description": self.description,
            "category": self.category,
            "sideEffects": list(self.side_effects or []),
            "contraindications": list(self.contraindications or []),
            "dosage": self.dosage,
            "aiAnalysis": self.ai_analysis,
            "source": self.source,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Interaction(db.Model):
    __tablename__ = "interactions"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    # Plain references: deleting a drug does not cascade to its interactions.
    drug1_id = db.Column(db.Integer, nullable=False, index=True)
    drug2_id = db.Column(db.Integer, nullable=False, index=True)
    drug1_name = db.Column(db.String(NAME_MAX_LENGTH), nullable=False)
    drug2_name = db.Column(db.String(NAME_MAX_LENGTH), nullable=False)
    interaction_type = db.Column(db.String(NAME_MAX_LENGTH), nullable=False)
    severity = db.Column(db.String(10), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    recommendation = db.Column(db.Text, nullable=False)
    source = db.Column(db.String(20), nullable=False, default="database")
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("drug1_id", "drug2_id", name="uq_interactions_pair"),
        db.CheckConstraint("drug1_id <> drug2_id", name="ck_interactions_distinct"),
        db.CheckConstraint("severity IN ('low', 'medium', 'high')", name="ck_interactions_severity"),
        db.CheckConstraint("source IN ('database', 'ai')", name="ck_interactions_source"),
        db.Index("ix_interactions_severity_source", "severity", "source"),
    )

    @property
    def drug_ids(self) -> tuple:
        return self.drug1_id, self.drug2_id

    def to_dict(self):
        return {
            "id": self.id,
            "drug1Id": self.drug1_id,
            "drug2Id": self.drug2_id,
            "drug1Name": self.drug1_name,
            "drug2Name": self.drug2_name,
            "interactionType": self.interaction_type,
            "severity": self.severity,
            "description": self.description,
            "recommendation": self.recommendation,
            "source": self.source,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
