"""
Seed data tests – curated dataset loads cleanly and re-running is a no-op.
"""

from app.seeds import SEED_DRUGS, SEED_INTERACTIONS, seed_database


class TestSeedDatabase:
    def test_seed_loads_everything(self, store):
        summary = seed_database(store)
        assert summary["drugsCreated"] == len(SEED_DRUGS)
        assert summary["interactionsCreated"] == len(SEED_INTERACTIONS)
        assert all(d.source == "manual" for d in store.all_drugs())
        assert all(i.source == "database" for i in store.all_interactions())

    def test_reseed_skips_existing(self, store):
        seed_database(store)
        summary = seed_database(store)
        assert summary["drugsCreated"] == 0
        assert summary["interactionsCreated"] == 0
        assert store.count_drugs() == len(SEED_DRUGS)

    def test_clear_reloads(self, store, make_drug):
        make_drug("Placebo")
        seed_database(store, clear=True)
        assert store.find_drug_by_name("Placebo") is None
        assert store.count_drugs() == len(SEED_DRUGS)

    def test_seeded_interactions_are_consistent(self, store):
        seed_database(store)
        for interaction in store.all_interactions():
            assert interaction.drug1_id < interaction.drug2_id
            assert store.get_drug(interaction.drug1_id).name == interaction.drug1_name
