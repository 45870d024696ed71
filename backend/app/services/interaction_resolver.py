"""
Interaction Resolver – cache-fill for every pair in a multi-drug check.

check_all flow:
  1. Dedupe ids, require at least two.
  2. Batch-fetch the drugs; any unknown id aborts the whole check.
  3. Enumerate all unordered pairs and look each up (both orderings).
  4. One batched AI call covering the full drug list if any pair is missing.
  5. Match AI entries back to missing pairs by unordered name equality,
     persist matches through the idempotent save.
  6. Risk level is recomputed locally from the final interaction list;
     the model's own overallRisk is ignored.

No retries: a failed AI call fails the check, and pairs the model skipped
simply lower interactionCount.
"""

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Optional

from app.errors import Conflict, DrugNotFound, InteractionNotFound, InvalidArgument, ServiceError
from app.models.models import Drug, Interaction
from app.services.risk import aggregate_risk
from app.validation import clean_interaction_fields, parse_id, parse_severity

logger = logging.getLogger("pillgraph.interactions")


@dataclass
class _Pair:
    drug1: Drug
    drug2: Drug


class InteractionResolver:
    def __init__(self, store, ai_client):
        self.store = store
        self.ai = ai_client

    # ── Multi-drug check ───────────────────────────────────────────

    def check_all(self, drug_ids) -> dict:
        if not isinstance(drug_ids, list):
            raise InvalidArgument("'drugIds' must be an array.")
        unique_ids = list(dict.fromkeys(parse_id(d, "drugIds") for d in drug_ids))
        if len(unique_ids) < 2:
            raise InvalidArgument("At least 2 distinct drugs are required for an interaction check.")

        logger.info("Interaction check started drugIds=%s", unique_ids)
        try:
            return self._check(unique_ids)
        except ServiceError as exc:
            logger.error(
                "Interaction check failed drugIds=%s [%s]: %s",
                unique_ids, exc.error_code, exc.message,
            )
            raise

    def _check(self, drug_ids: list[int]) -> dict:
        drugs = {drug.id: drug for drug in self.store.get_drugs(drug_ids)}
        if len(drugs) != len(drug_ids):
            unknown = [d for d in drug_ids if d not in drugs]
            raise DrugNotFound(f"Unknown drug ids: {', '.join(str(d) for d in unknown)}")

        pairs = [_Pair(drugs[a], drugs[b]) for a, b in combinations(drug_ids, 2)]
        resolved: list[Interaction] = []
        missing: list[_Pair] = []
        for pair in pairs:
            found = self.store.find_interaction_between(pair.drug1.id, pair.drug2.id)
            if found:
                resolved.append(found)
            else:
                missing.append(pair)
        logger.info("Pairs=%d resolved=%d missing=%d", len(pairs), len(resolved), len(missing))

        created: list[Interaction] = []
        if missing:
            analysis = self.ai.analyze_interactions([drugs[d].name for d in drug_ids])
            for pair, entry in self._match(missing, analysis.entries):
                created.append(self._save_pair(pair.drug1, pair.drug2, entry.to_interaction_fields()))

        interactions = resolved + created
        if not missing:
            source = "database"
        elif len(missing) == len(pairs):
            source = "ai"
        else:
            source = "mixed"
        risk_level = aggregate_risk(interactions)

        logger.info(
            "Interaction check finished drugCount=%d interactionCount=%d riskLevel=%s source=%s",
            len(drug_ids), len(interactions), risk_level, source,
        )
        return {
            "interactions": interactions,
            "riskLevel": risk_level,
            "source": source,
            "drugCount": len(drug_ids),
            "interactionCount": len(interactions),
        }

    @staticmethod
    def _match(missing: list[_Pair], entries) -> list[tuple]:
        """Pair each missing pair with at most one AI entry; extras are dropped."""
        open_pairs = list(missing)
        matches = []
        for entry in entries:
            pair = next(
                (p for p in open_pairs if entry.names_match(p.drug1.name, p.drug2.name)),
                None,
            )
            if pair is None:
                logger.info("Discarding unmatched AI entry %s / %s", entry.drug1, entry.drug2)
                continue
            open_pairs.remove(pair)
            matches.append((pair, entry))
        if open_pairs:
            logger.warning(
                "AI returned no usable entry for %d pair(s): %s",
                len(open_pairs),
                ", ".join(f"{p.drug1.name}/{p.drug2.name}" for p in open_pairs),
            )
        return matches

    # ── Single-pair operations ─────────────────────────────────────

    def find(self, drug1_id, drug2_id) -> Optional[Interaction]:
        a, b = parse_id(drug1_id, "drug1Id"), parse_id(drug2_id, "drug2Id")
        if a == b:
            raise InvalidArgument("A drug cannot interact with itself.")
        interaction = self.store.find_interaction_between(a, b)
        logger.info("Interaction lookup %s-%s found=%s", a, b, interaction is not None)
        return interaction

    def get(self, interaction_id) -> Interaction:
        interaction = self.store.get_interaction(parse_id(interaction_id, "interactionId"))
        if interaction is None:
            raise InteractionNotFound(f"Interaction {interaction_id} not found.")
        return interaction

    def save(self, data) -> Interaction:
        """
        Manual save: ``{drug1Id, drug2Id, interactionType, severity,
        description, recommendation, source?}``. Denormalised names are taken
        from the stored drugs. Saving an existing pair returns that record.
        """
        if not isinstance(data, dict):
            raise InvalidArgument("Interaction payload must be a JSON object.")
        a, b = parse_id(data.get("drug1Id"), "drug1Id"), parse_id(data.get("drug2Id"), "drug2Id")
        return self.save_between(a, b, clean_interaction_fields(data))

    def save_between(self, drug1_id: int, drug2_id: int, fields: dict) -> Interaction:
        if drug1_id == drug2_id:
            raise InvalidArgument("A drug cannot interact with itself.")
        drugs = {drug.id: drug for drug in self.store.get_drugs([drug1_id, drug2_id])}
        unknown = [d for d in (drug1_id, drug2_id) if d not in drugs]
        if unknown:
            raise DrugNotFound(f"Unknown drug ids: {', '.join(str(d) for d in unknown)}")
        return self._save_pair(drugs[drug1_id], drugs[drug2_id], fields)

    def _save_pair(self, drug1: Drug, drug2: Drug, fields: dict) -> Interaction:
        """Idempotent on the unordered pair, including under insert races."""
        existing = self.store.find_interaction_between(drug1.id, drug2.id)
        if existing:
            logger.info("Interaction %s-%s already stored (id=%s)", drug1.name, drug2.name, existing.id)
            return existing
        try:
            return self.store.create_interaction(drug1, drug2, fields)
        except Conflict:
            winner = self.store.find_interaction_between(drug1.id, drug2.id)
            if winner is None:
                raise
            logger.info("Interaction %s-%s inserted concurrently; returning id=%s",
                        drug1.name, drug2.name, winner.id)
            return winner

    def find_by_drug(self, drug_id) -> list[Interaction]:
        drug_id = parse_id(drug_id, "drugId")
        interactions = self.store.interactions_for_drug(drug_id)
        logger.info("Interactions for drug %s: %d", drug_id, len(interactions))
        return interactions

    def find_by_severity(self, severity) -> list[Interaction]:
        severity = parse_severity(severity)
        interactions = self.store.interactions_by_severity(severity)
        logger.info("Interactions with severity=%s: %d", severity, len(interactions))
        return interactions

    def delete(self, interaction_id) -> None:
        interaction = self.get(interaction_id)
        label = f"{interaction.drug1_name}-{interaction.drug2_name}"
        self.store.delete_interaction(interaction)
        logger.info("Deleted interaction id=%s %s", interaction_id, label)
