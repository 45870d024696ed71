"""
Pytest configuration & fixtures for Pillgraph backend tests.

Key design decisions:
  - Uses sqlite:///:memory: for speed and isolation (fresh app per test).
  - Injects a fake inference client through create_app(ai_client=...),
    so no test ever reaches the network.
  - Rate limiting is disabled because APP_ENV=testing.
"""

import os
import sys

import pytest

# ── 1. Ensure backend package is importable ──
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# ── 2. Set test environment BEFORE anything else ──
os.environ["AI_API_KEY"] = "test-key-not-real"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["APP_ENV"] = "testing"
os.environ["LOG_LEVEL"] = "DEBUG"

# ── 3. NOW safe to import application modules ──
from app.main import create_app
from app.database import db as _db
from app.services.ai_schemas import DrugAnalysis, InteractionAnalysis
from app.services.container import EXTENSION_KEY


# ═══════════════════════════════════════════
# FAKE INFERENCE CLIENT
# ═══════════════════════════════════════════

def _drug_payload(name, /, **overrides):
    """A well-formed single-drug analysis as the model would return it."""
    payload = {
        "name": name,
        "genericName": f"{name} generic",
        "category": "Test category",
        "description": f"{name} is a test drug.",
        "sideEffects": ["Headache", "Nausea"],
        "contraindications": ["Pregnancy"],
        "dosage": "10 mg once daily",
        "aiAnalysis": f"Detailed analysis of {name}.",
    }
    payload.update(overrides)
    return payload


def _interaction_entry(drug1, drug2, severity="medium", **overrides):
    entry = {
        "drug1": drug1,
        "drug2": drug2,
        "interactionType": "Pharmacodynamic",
        "severity": severity,
        "description": f"{drug1} interacts with {drug2}.",
        "recommendation": "Monitor the patient.",
    }
    entry.update(overrides)
    return entry


class FakeAIClient:
    """
    Stands in for AIClient. Payloads go through the real schema parsing, so
    malformed-output handling is exercised exactly as in production.
    """

    def __init__(self):
        self.drug_payloads = {}
        self.interaction_payload = {"interactions": []}
        self.chat_chunks = ["Hello", " world"]
        self.error = None
        self.chat_error = None
        self.calls = {"analyze_drug": [], "analyze_interactions": [], "stream_chat": []}

    def analyze_drug(self, drug_name):
        self.calls["analyze_drug"].append(drug_name)
        if self.error:
            raise self.error
        payload = self.drug_payloads.get(drug_name.lower(), _drug_payload(drug_name))
        return DrugAnalysis.from_payload(payload)

    def analyze_interactions(self, drug_names):
        self.calls["analyze_interactions"].append(list(drug_names))
        if self.error:
            raise self.error
        payload = self.interaction_payload
        if callable(payload):
            payload = payload(drug_names)
        return InteractionAnalysis.from_payload(payload)

    def stream_chat(self, message, history):
        self.calls["stream_chat"].append((message, list(history)))
        for chunk in self.chat_chunks:
            yield chunk
        if self.chat_error:
            raise self.chat_error


# ═══════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════

@pytest.fixture
def fake_ai():
    return FakeAIClient()


@pytest.fixture
def app(fake_ai):
    """Application with an empty in-memory database."""
    application = create_app(ai_client=fake_ai)
    with application.app_context():
        yield application
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def services(app):
    return app.extensions[EXTENSION_KEY]


@pytest.fixture
def store(services):
    return services.store


@pytest.fixture
def make_drug(store):
    """Factory: make_drug("Aspirin", source="ai", side_effects=[...])."""

    def _make(name, **fields):
        data = {
            "name": name,
            "description": f"{name} description",
            "category": "Test category",
            "source": "manual",
        }
        data.update(fields)
        return store.create_drug(data)

    return _make


@pytest.fixture
def make_interaction(store):
    """Factory: make_interaction(drug_a, drug_b, severity="high")."""

    def _make(drug1, drug2, severity="medium", source="database", **fields):
        data = {
            "interaction_type": "Pharmacodynamic",
            "severity": severity,
            "description": f"{drug1.name} with {drug2.name}",
            "recommendation": "Monitor.",
            "source": source,
        }
        data.update(fields)
        return store.create_interaction(drug1, drug2, data)

    return _make


@pytest.fixture
def drug_payload():
    return _drug_payload


@pytest.fixture
def interaction_entry():
    return _interaction_entry
