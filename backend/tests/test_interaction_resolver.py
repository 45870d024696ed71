"""
Interaction resolver tests – multi-drug check orchestration and the
idempotent single-pair save.
"""

import pytest

from app.errors import (
    AIConnectionError, AIResponseMalformed, DrugNotFound, InteractionNotFound, InvalidArgument,
)
from app.models.models import Interaction


@pytest.fixture
def abc(make_drug):
    return make_drug("Alpha"), make_drug("Beta"), make_drug("Gamma")


# ════════════════════════════════════════════
# MULTI-DRUG CHECK
# ════════════════════════════════════════════

class TestCheckAll:
    def test_all_pairs_stored_skips_ai(self, services, fake_ai, abc, make_interaction):
        a, b, c = abc
        make_interaction(a, b, "low")
        make_interaction(b, c, "low")
        make_interaction(a, c, "medium")

        result = services.interactions.check_all([a.id, b.id, c.id])

        assert result["source"] == "database"
        assert result["riskLevel"] == "medium"
        assert result["drugCount"] == 3
        assert result["interactionCount"] == 3
        assert fake_ai.calls["analyze_interactions"] == []

    def test_mixed_fill(self, services, fake_ai, abc, make_interaction, store, interaction_entry):
        a, b, c = abc
        make_interaction(a, b, "low")
        fake_ai.interaction_payload = {
            "interactions": [
                interaction_entry("alpha", "GAMMA", "medium"),
                interaction_entry("Gamma", "Beta", "medium"),
            ],
            "overallRisk": "low",
        }

        result = services.interactions.check_all([a.id, b.id, c.id])

        assert fake_ai.calls["analyze_interactions"] == [["Alpha", "Beta", "Gamma"]]
        assert result["source"] == "mixed"
        assert result["interactionCount"] == 3
        # computed locally; the model's overallRisk is ignored
        assert result["riskLevel"] == "high"
        assert store.count_interactions() == 3
        stored = store.find_interaction_between(c.id, a.id)
        assert stored.source == "ai"
        assert (stored.drug1_id, stored.drug2_id) == (a.id, c.id)

    def test_all_missing_is_ai_source(self, services, fake_ai, abc, interaction_entry):
        a, b, _ = abc
        fake_ai.interaction_payload = {"interactions": [interaction_entry("Alpha", "Beta", "high")]}
        result = services.interactions.check_all([a.id, b.id])
        assert result["source"] == "ai"
        assert result["riskLevel"] == "high"
        assert isinstance(result["interactions"][0], Interaction)

    def test_stored_high_pair_dominates_low_ai_pairs(
        self, services, fake_ai, abc, make_interaction, interaction_entry,
    ):
        a, b, c = abc
        make_interaction(a, b, "high")
        fake_ai.interaction_payload = {"interactions": [
            interaction_entry("Beta", "Gamma", "low"),
            interaction_entry("Alpha", "Gamma", "low"),
        ]}

        result = services.interactions.check_all([a.id, b.id, c.id])

        assert result["riskLevel"] == "high"
        assert result["source"] == "mixed"
        assert result["interactionCount"] == 3
        assert fake_ai.calls["analyze_interactions"] == [["Alpha", "Beta", "Gamma"]]

    def test_second_check_served_from_database(self, services, fake_ai, abc, interaction_entry):
        a, b, c = abc
        fake_ai.interaction_payload = {"interactions": [
            interaction_entry("Alpha", "Beta"),
            interaction_entry("Alpha", "Gamma", "low"),
            interaction_entry("Beta", "Gamma", "high"),
        ]}
        first = services.interactions.check_all([a.id, b.id, c.id])
        second = services.interactions.check_all([str(c.id), b.id, a.id])
        assert first["source"] == "ai"
        assert second["source"] == "database"
        assert second["interactionCount"] == first["interactionCount"] == 3
        assert second["riskLevel"] == first["riskLevel"]
        assert len(fake_ai.calls["analyze_interactions"]) == 1

    def test_overlong_interaction_type_dropped_before_any_write(
        self, services, fake_ai, abc, store, interaction_entry,
    ):
        a, b, c = abc
        fake_ai.interaction_payload = {"interactions": [
            interaction_entry("Alpha", "Beta", "low"),
            interaction_entry("Alpha", "Gamma", "high", interactionType="x" * 600),
        ]}
        result = services.interactions.check_all([a.id, b.id, c.id])
        assert result["interactionCount"] == 1
        assert result["riskLevel"] == "low"
        assert store.count_interactions() == 1

    def test_case_twin_drugs_never_match_an_entry(self, services, fake_ai, make_drug, interaction_entry):
        twin_a, twin_b = make_drug("Aspirin"), make_drug("aspirin")
        fake_ai.interaction_payload = {"interactions": [interaction_entry("Aspirin", "aspirin")]}
        result = services.interactions.check_all([twin_a.id, twin_b.id])
        assert result["interactionCount"] == 0
        assert result["source"] == "ai"

    def test_incomplete_ai_result_lowers_count(self, services, fake_ai, abc, interaction_entry):
        a, b, c = abc
        fake_ai.interaction_payload = {"interactions": [interaction_entry("Alpha", "Beta", "low")]}
        result = services.interactions.check_all([a.id, b.id, c.id])
        assert result["interactionCount"] == 1
        assert result["source"] == "ai"
        assert result["riskLevel"] == "low"

    def test_unmatched_and_duplicate_entries_discarded(
        self, services, fake_ai, abc, store, interaction_entry,
    ):
        a, b, _ = abc
        fake_ai.interaction_payload = {"interactions": [
            interaction_entry("Alpha", "Unknown"),
            interaction_entry("Alpha", "Alpha"),
            interaction_entry("Beta", "Alpha", "low"),
            interaction_entry("Alpha", "Beta", "high"),
        ]}
        result = services.interactions.check_all([a.id, b.id])
        assert result["interactionCount"] == 1
        assert result["interactions"][0].severity == "low"
        assert store.count_interactions() == 1

    def test_invalid_entries_dropped(self, services, fake_ai, abc, interaction_entry):
        a, b, c = abc
        fake_ai.interaction_payload = {"interactions": [
            "not an object",
            interaction_entry("Alpha", "Beta", "critical"),
            interaction_entry("Alpha", "Gamma", description=""),
            interaction_entry("Beta", "Gamma", "medium"),
        ]}
        result = services.interactions.check_all([a.id, b.id, c.id])
        assert result["interactionCount"] == 1
        assert result["riskLevel"] == "medium"

    def test_duplicate_ids_collapse(self, services, fake_ai, abc, make_interaction):
        a, b, _ = abc
        make_interaction(a, b)
        result = services.interactions.check_all([a.id, b.id, a.id])
        assert result["drugCount"] == 2

    @pytest.mark.parametrize("drug_ids", [[], [1], [1, 1], "1,2", None, [1, "x"], [True, 2]])
    def test_invalid_input_rejected(self, services, fake_ai, abc, drug_ids):
        with pytest.raises(InvalidArgument):
            services.interactions.check_all(drug_ids)
        assert fake_ai.calls["analyze_interactions"] == []

    def test_unknown_id_persists_nothing(self, services, fake_ai, abc, store):
        a, b, _ = abc
        with pytest.raises(DrugNotFound):
            services.interactions.check_all([a.id, b.id, 999])
        assert fake_ai.calls["analyze_interactions"] == []
        assert store.count_interactions() == 0

    def test_ai_failure_aborts_check(self, services, fake_ai, abc, store):
        a, b, _ = abc
        fake_ai.error = AIConnectionError("down")
        with pytest.raises(AIConnectionError):
            services.interactions.check_all([a.id, b.id])
        assert store.count_interactions() == 0

    @pytest.mark.parametrize("payload", [{}, {"interactions": "none"}, ["not", "an", "object"]])
    def test_malformed_batch_aborts_check(self, services, fake_ai, abc, store, payload):
        a, b, _ = abc
        fake_ai.interaction_payload = payload
        with pytest.raises(AIResponseMalformed):
            services.interactions.check_all([a.id, b.id])
        assert store.count_interactions() == 0


# ════════════════════════════════════════════
# SINGLE-PAIR OPERATIONS
# ════════════════════════════════════════════

def _payload(a, b, **overrides):
    data = {
        "drug1Id": a,
        "drug2Id": b,
        "interactionType": "Pharmacokinetic",
        "severity": "High",
        "description": "Raises exposure.",
        "recommendation": "Avoid.",
    }
    data.update(overrides)
    return data


class TestSave:
    def test_save_fills_names_and_defaults_source(self, services, abc):
        a, b, _ = abc
        interaction = services.interactions.save(_payload(b.id, a.id))
        assert interaction.source == "database"
        assert interaction.severity == "high"
        assert (interaction.drug1_id, interaction.drug2_id) == (a.id, b.id)
        assert (interaction.drug1_name, interaction.drug2_name) == ("Alpha", "Beta")

    def test_save_is_idempotent_in_either_order(self, services, abc, store):
        a, b, _ = abc
        first = services.interactions.save(_payload(a.id, b.id))
        second = services.interactions.save(_payload(str(b.id), str(a.id), severity="low"))
        assert second.id == first.id
        assert second.severity == "high"
        assert store.count_interactions() == 1

    def test_save_absorbs_insert_race(self, services, abc, store, make_interaction, monkeypatch):
        a, b, _ = abc
        winner = make_interaction(a, b)
        real_lookup = store.find_interaction_between
        calls = []

        def find_after_race(x, y):
            calls.append((x, y))
            return None if len(calls) == 1 else real_lookup(x, y)

        monkeypatch.setattr(store, "find_interaction_between", find_after_race)
        assert services.interactions.save(_payload(a.id, b.id)).id == winner.id

    def test_self_pair_rejected(self, services, abc, store):
        a, _, _ = abc
        with pytest.raises(InvalidArgument):
            services.interactions.save(_payload(a.id, a.id))
        assert store.count_interactions() == 0

    def test_unknown_drug_rejected(self, services, abc):
        a, _, _ = abc
        with pytest.raises(DrugNotFound):
            services.interactions.save(_payload(a.id, 999))

    @pytest.mark.parametrize("overrides", [
        {"severity": "severe"},
        {"description": ""},
        {"interactionType": None},
        {"source": "manual"},
        {"interactionType": "x" * 256},
    ])
    def test_invalid_fields_rejected(self, services, abc, overrides):
        a, b, _ = abc
        with pytest.raises(InvalidArgument):
            services.interactions.save(_payload(a.id, b.id, **overrides))

    def test_save_between_with_ai_source(self, services, abc):
        a, b, _ = abc
        interaction = services.interactions.save_between(a.id, b.id, {
            "interaction_type": "Additive",
            "severity": "low",
            "description": "d",
            "recommendation": "r",
            "source": "ai",
        })
        assert interaction.source == "ai"


class TestLookups:
    def test_find_both_orderings(self, services, abc, make_interaction):
        a, b, c = abc
        stored = make_interaction(a, b)
        assert services.interactions.find(b.id, a.id).id == stored.id
        assert services.interactions.find(a.id, c.id) is None

    def test_find_self_pair_rejected(self, services, abc):
        a, _, _ = abc
        with pytest.raises(InvalidArgument):
            services.interactions.find(a.id, a.id)

    def test_find_by_drug_and_severity(self, services, abc, make_interaction):
        a, b, c = abc
        make_interaction(a, b, "high")
        make_interaction(b, c, "low")
        assert len(services.interactions.find_by_drug(b.id)) == 2
        assert len(services.interactions.find_by_drug(a.id)) == 1
        assert [i.severity for i in services.interactions.find_by_severity("HIGH")] == ["high"]
        with pytest.raises(InvalidArgument):
            services.interactions.find_by_severity("critical")

    def test_get_and_delete(self, services, abc, make_interaction, store):
        a, b, _ = abc
        stored = make_interaction(a, b)
        assert services.interactions.get(stored.id).id == stored.id
        services.interactions.delete(stored.id)
        assert store.count_interactions() == 0
        with pytest.raises(InteractionNotFound):
            services.interactions.get(stored.id)
