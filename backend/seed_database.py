"""
One-off script to load the curated seed drugs and interactions.
Run from backend/ directory:
    python seed_database.py           # add missing records
    python seed_database.py --clear   # wipe drugs and interactions first
"""
import sys, os

sys.path.insert(0, os.path.dirname(__file__))

from app.main import create_app
from app.seeds import seed_database
from app.services.container import get_services

app = create_app()

with app.app_context():
    store = get_services().store
    clear = "--clear" in sys.argv[1:]
    if clear:
        print("Clearing existing drugs and interactions...")

    summary = seed_database(store, clear=clear)

    print(f"\n{'='*50}")
    print(f"Drugs: {summary['drugsCreated']} created, {summary['drugsSkipped']} skipped")
    print(f"Interactions: {summary['interactionsCreated']} created, {summary['interactionsSkipped']} skipped")
    print(f"Totals in DB: {store.count_drugs()} drugs, {store.count_interactions()} interactions")
    print(f"{'='*50}")
