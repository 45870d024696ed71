"""
Graph Projector – read-only node/edge view of stored drugs and interactions
for the visualisation front end, plus aggregate statistics.
"""

import logging

from app.errors import DrugNotFound
from app.models.models import SEVERITIES
from app.validation import parse_id

logger = logging.getLogger("pillgraph.graph")

BASE_NODE_VALUE = 10
AI_NODE_VALUE = 8
MAX_SIDE_EFFECT_BONUS = 5
EDGE_WEIGHTS = {"low": 1, "medium": 3, "high": 5}


def node_value(drug) -> int:
    """Display size: smaller for AI-sourced drugs, grows with side effects (capped)."""
    value = AI_NODE_VALUE if drug.is_ai_generated else BASE_NODE_VALUE
    return value + min(len(drug.side_effects or []), MAX_SIDE_EFFECT_BONUS)


def edge_value(severity: str) -> int:
    return EDGE_WEIGHTS.get(severity, 1)


class GraphProjector:
    def __init__(self, store):
        self.store = store

    def project(self, drug_id=None) -> dict:
        """All drugs and interactions, or the 1-hop neighbourhood of *drug_id*."""
        if drug_id is None or drug_id == "":
            drugs = self.store.all_drugs()
            interactions = self.store.all_interactions()
        else:
            target_id = parse_id(drug_id, "drugId")
            target = self.store.get_drug(target_id)
            if target is None:
                raise DrugNotFound(f"Drug {drug_id} not found.")
            interactions = self.store.interactions_for_drug(target_id)
            related_ids = {target_id}
            for interaction in interactions:
                related_ids.update(interaction.drug_ids)
            drugs = sorted(self.store.get_drugs(related_ids), key=lambda d: d.id)

        graph = {
            "nodes": [self._node(d) for d in drugs],
            "edges": [self._edge(i) for i in interactions],
        }
        logger.info(
            "Graph projected nodes=%d edges=%d filtered=%s",
            len(graph["nodes"]), len(graph["edges"]), drug_id is not None,
        )
        return graph

    def stats(self) -> dict:
        stats = {
            "totalDrugs": self.store.count_drugs(),
            "totalInteractions": self.store.count_interactions(),
            "severityDistribution": self.store.severity_distribution(),
        }
        logger.info("Graph stats %s", stats)
        return stats

    def drug_stats(self, drug_id) -> dict:
        target_id = parse_id(drug_id, "drugId")
        drug = self.store.get_drug(target_id)
        if drug is None:
            raise DrugNotFound(f"Drug {drug_id} not found.")

        interactions = self.store.interactions_for_drug(target_id)
        counts = {severity: 0 for severity in SEVERITIES}
        for interaction in interactions:
            counts[interaction.severity] = counts.get(interaction.severity, 0) + 1

        return {
            "drugId": drug.id,
            "drugName": drug.name,
            "totalInteractions": len(interactions),
            "severityCounts": counts,
            "highRiskCount": counts["high"],
            "mediumRiskCount": counts["medium"],
            "lowRiskCount": counts["low"],
        }

    @staticmethod
    def _node(drug) -> dict:
        return {
            "id": str(drug.id),
            "name": drug.name,
            "category": drug.category,
            "value": node_value(drug),
            "source": drug.source or "manual",
            "description": drug.description,
        }

    @staticmethod
    def _edge(interaction) -> dict:
        return {
            "source": str(interaction.drug1_id),
            "target": str(interaction.drug2_id),
            "value": edge_value(interaction.severity),
            "severity": interaction.severity,
            "interactionType": interaction.interaction_type or "unknown",
            "description": interaction.description,
        }
