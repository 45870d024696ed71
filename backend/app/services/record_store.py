"""
Record Store – the only module that talks to the database.

Wraps the Flask-SQLAlchemy session behind the operations the resolvers
need: unique-constrained inserts, point lookups, bidirectional pair lookups,
case-insensitive name lookups and severity aggregation.

Uniqueness races are settled by the database: a losing insert is rolled
back and surfaces as ``Conflict`` so callers can decide whether to re-read.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.errors import Conflict, Internal
from app.models.models import Drug, Interaction

logger = logging.getLogger("pillgraph.store")


class RecordStore:
    """Thin repository over a Flask-SQLAlchemy ``db`` handle."""

    def __init__(self, db):
        self.db = db

    # ── Drugs ──────────────────────────────────────────────────────

    def get_drug(self, drug_id: int) -> Optional[Drug]:
        return self.db.session.get(Drug, drug_id)

    def get_drugs(self, drug_ids: Iterable[int]) -> list[Drug]:
        ids = list(drug_ids)
        if not ids:
            return []
        return Drug.query.filter(Drug.id.in_(ids)).all()

    def find_drug_by_name(self, name: str) -> Optional[Drug]:
        """Case-insensitive exact match against name OR generic name."""
        needle = name.strip().lower()
        return (
            Drug.query
            .filter(self.db.or_(
                self.db.func.lower(Drug.name) == needle,
                self.db.func.lower(Drug.generic_name) == needle,
            ))
            .order_by(Drug.id)
            .first()
        )

    def search_drugs(self, term: str) -> list[Drug]:
        """Case-insensitive substring search; LIKE wildcards are literal."""
        return (
            Drug.query
            .filter(self.db.or_(
                Drug.name.icontains(term, autoescape=True),
                Drug.generic_name.icontains(term, autoescape=True),
            ))
            .order_by(Drug.name)
            .all()
        )

    def list_drugs(self, offset: int, limit: int) -> tuple[list[Drug], int]:
        drugs = (
            Drug.query
            .order_by(Drug.created_at.desc(), Drug.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return drugs, Drug.query.count()

    def all_drugs(self) -> list[Drug]:
        return Drug.query.order_by(Drug.id).all()

    def count_drugs(self) -> int:
        return Drug.query.count()

    def create_drug(self, fields: dict) -> Drug:
        drug = Drug(**fields)
        self._insert(drug, f"drug name '{fields.get('name')}'")
        logger.info("Created drug id=%s name=%s source=%s", drug.id, drug.name, drug.source)
        return drug

    def update_drug(self, drug: Drug, fields: dict) -> Drug:
        for column, value in fields.items():
            setattr(drug, column, value)
        try:
            self.db.session.commit()
        except IntegrityError as exc:
            self.db.session.rollback()
            raise Conflict(f"Drug '{fields.get('name', drug.name)}' already exists.") from exc
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            logger.error("Updating drug id=%s failed: %s", drug.id, exc)
            raise Internal(f"Could not update drug {drug.id}.") from exc
        return drug

    def delete_drug(self, drug: Drug) -> None:
        self.db.session.delete(drug)
        self.db.session.commit()

    # ── Interactions ───────────────────────────────────────────────

    def get_interaction(self, interaction_id: int) -> Optional[Interaction]:
        return self.db.session.get(Interaction, interaction_id)

    def find_interaction_between(self, drug_a: int, drug_b: int) -> Optional[Interaction]:
        """Look up a pair in both orderings."""
        return Interaction.query.filter(self.db.or_(
            self.db.and_(Interaction.drug1_id == drug_a, Interaction.drug2_id == drug_b),
            self.db.and_(Interaction.drug1_id == drug_b, Interaction.drug2_id == drug_a),
        )).first()

    def interactions_for_drug(self, drug_id: int) -> list[Interaction]:
        return (
            Interaction.query
            .filter(self.db.or_(Interaction.drug1_id == drug_id, Interaction.drug2_id == drug_id))
            .order_by(Interaction.id)
            .all()
        )

    def interactions_by_severity(self, severity: str) -> list[Interaction]:
        return Interaction.query.filter_by(severity=severity).order_by(Interaction.id).all()

    def all_interactions(self) -> list[Interaction]:
        return Interaction.query.order_by(Interaction.id).all()

    def count_interactions(self) -> int:
        return Interaction.query.count()

    def severity_distribution(self) -> dict[str, int]:
        rows = (
            self.db.session.query(Interaction.severity, self.db.func.count(Interaction.id))
            .group_by(Interaction.severity)
            .all()
        )
        return {severity: count for severity, count in rows}

    def create_interaction(self, drug1: Drug, drug2: Drug, fields: dict) -> Interaction:
        """Insert a pair, normalising the ordering to drug1_id < drug2_id."""
        if drug1.id > drug2.id:
            drug1, drug2 = drug2, drug1
        interaction = Interaction(
            drug1_id=drug1.id,
            drug2_id=drug2.id,
            drug1_name=drug1.name,
            drug2_name=drug2.name,
            **fields,
        )
        self._insert(interaction, f"interaction {drug1.id}-{drug2.id}")
        logger.info(
            "Created interaction id=%s %s-%s severity=%s source=%s",
            interaction.id, interaction.drug1_name, interaction.drug2_name,
            interaction.severity, interaction.source,
        )
        return interaction

    def delete_interaction(self, interaction: Interaction) -> None:
        self.db.session.delete(interaction)
        self.db.session.commit()

    # ── Misc ───────────────────────────────────────────────────────

    def clear(self) -> None:
        """Delete every record. Used by the seed script's --clear option."""
        Interaction.query.delete()
        Drug.query.delete()
        self.db.session.commit()

    def ping(self) -> bool:
        try:
            self.db.session.execute(self.db.text("SELECT 1"))
            return True
        except Exception as exc:
            logger.warning("Database ping failed: %s", exc)
            self.db.session.rollback()
            return False

    def _insert(self, obj, label: str) -> None:
        self.db.session.add(obj)
        try:
            self.db.session.commit()
        except IntegrityError as exc:
            self.db.session.rollback()
            logger.info("Uniqueness conflict on %s", label)
            raise Conflict(f"Record already exists: {label}.") from exc
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            logger.error("Writing %s failed: %s", label, exc)
            raise Internal(f"Could not store {label}.") from exc
