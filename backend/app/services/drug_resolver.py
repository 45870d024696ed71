"""
Drug Resolver – cache-or-fetch lookup for a single drug, plus drug CRUD.

Lookup flow:
  DB check (name or generic name, case-insensitive) → (if missing) AI
  analysis → validation → insert with source='ai' → return.

Persistence is idempotent: when the analysed drug already exists, or a
concurrent request wins the insert race, the stored record is returned
instead of an error.
"""

import logging
import math

from app.errors import Conflict, DrugNotFound, InvalidArgument, ServiceError
from app.models.models import Drug
from app.validation import clean_drug_fields, parse_id

logger = logging.getLogger("pillgraph.drugs")

MAX_PAGE_SIZE = 100


class DrugResolver:
    def __init__(self, store, ai_client):
        self.store = store
        self.ai = ai_client

    # ── Cache-or-fetch ─────────────────────────────────────────────

    def resolve(self, name) -> tuple[Drug, str]:
        """
        Return ``(drug, source)`` where source is "database" when the record
        was already stored and "ai" when this call created it.
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgument("Drug name must be a non-empty string.")
        drug_name = name.strip()

        try:
            existing = self.store.find_drug_by_name(drug_name)
            if existing:
                logger.info("Drug '%s' served from database (id=%s)", drug_name, existing.id)
                return existing, "database"

            logger.info("Drug '%s' not in database, requesting AI analysis", drug_name)
            analysis = self.ai.analyze_drug(drug_name)
            return self._persist_analysis(drug_name, analysis)
        except ServiceError as exc:
            logger.error("Resolving drug '%s' failed [%s]: %s", drug_name, exc.error_code, exc.message)
            raise

    def _persist_analysis(self, requested: str, analysis) -> tuple[Drug, str]:
        # The model may normalise the name, so re-check under the analysed name.
        stored = self.store.find_drug_by_name(analysis.name)
        if stored:
            logger.info(
                "AI analysis for '%s' maps to stored drug '%s' (id=%s)",
                requested, stored.name, stored.id,
            )
            return stored, "database"

        try:
            drug = self.store.create_drug(analysis.to_drug_fields())
        except Conflict:
            winner = self.store.find_drug_by_name(analysis.name)
            if winner is None:
                raise
            logger.info("Drug '%s' was inserted concurrently; returning id=%s", winner.name, winner.id)
            return winner, "database"

        logger.info("AI analysis for '%s' stored as drug id=%s", requested, drug.id)
        return drug, "ai"

    # ── CRUD ───────────────────────────────────────────────────────

    def list_page(self, page=1, limit=10) -> dict:
        page_num = max(1, _as_int(page, "page", 1))
        limit_num = min(MAX_PAGE_SIZE, max(1, _as_int(limit, "limit", 10)))
        drugs, total = self.store.list_drugs((page_num - 1) * limit_num, limit_num)
        logger.info("Listed drugs page=%d limit=%d total=%d", page_num, limit_num, total)
        return {
            "drugs": drugs,
            "total": total,
            "page": page_num,
            "limit": limit_num,
            "totalPages": math.ceil(total / limit_num),
        }

    def search(self, term) -> list[Drug]:
        if not isinstance(term, str) or not term.strip():
            raise InvalidArgument("Search term must be a non-empty string.")
        drugs = self.store.search_drugs(term.strip())
        logger.info("Drug search '%s' matched %d", term.strip(), len(drugs))
        return drugs

    def get(self, drug_id) -> Drug:
        drug = self.store.get_drug(parse_id(drug_id, "drugId"))
        if drug is None:
            raise DrugNotFound(f"Drug {drug_id} not found.")
        return drug

    def create(self, data) -> Drug:
        fields = clean_drug_fields(data)
        fields.setdefault("source", "manual")
        try:
            return self.store.create_drug(fields)
        except Conflict:
            logger.error("Creating drug '%s' failed: name already exists", fields["name"])
            raise Conflict(f"Drug '{fields['name']}' already exists.") from None

    def update(self, drug_id, data) -> Drug:
        drug = self.get(drug_id)
        fields = clean_drug_fields(data, partial=True)
        drug = self.store.update_drug(drug, fields)
        logger.info("Updated drug id=%s fields=%s", drug.id, sorted(fields))
        return drug

    def delete(self, drug_id) -> None:
        drug = self.get(drug_id)
        name = drug.name
        self.store.delete_drug(drug)
        logger.info("Deleted drug id=%s name=%s", drug_id, name)


def _as_int(value, field: str, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"'{field}' must be an integer.")
