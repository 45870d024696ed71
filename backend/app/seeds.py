"""
Curated seed data – a handful of common drugs and well-documented
interactions, loaded by ``seed_database.py``.
"""

import logging

from app.errors import Conflict

logger = logging.getLogger("pillgraph.seeds")

SEED_DRUGS = [
    {
        "name": "Aspirin",
        "generic_name": "Acetylsalicylic acid",
        "description": "Non-steroidal anti-inflammatory drug used for pain, fever and platelet inhibition.",
        "category": "NSAID / Antiplatelet",
        "side_effects": ["Gastric irritation", "Gastrointestinal bleeding", "Tinnitus at high doses"],
        "contraindications": ["Active peptic ulcer", "Haemophilia", "Children under 16 with viral illness"],
        "dosage": "75-100 mg once daily for cardiovascular prevention; 300-900 mg every 4-6 h for pain.",
    },
    {
        "name": "Warfarin",
        "generic_name": "Warfarin sodium",
        "description": "Vitamin K antagonist oral anticoagulant.",
        "category": "Anticoagulant",
        "side_effects": ["Bleeding", "Bruising", "Skin necrosis (rare)"],
        "contraindications": ["Active bleeding", "Pregnancy", "Severe hepatic impairment"],
        "dosage": "Individualised to a target INR, typically 2-10 mg once daily.",
    },
    {
        "name": "Ibuprofen",
        "generic_name": "Ibuprofen",
        "description": "Propionic acid NSAID used for pain, inflammation and fever.",
        "category": "NSAID",
        "side_effects": ["Dyspepsia", "Nausea", "Renal impairment", "Fluid retention"],
        "contraindications": ["Active peptic ulcer", "Severe heart failure", "Third trimester of pregnancy"],
        "dosage": "200-400 mg every 4-6 h, maximum 1200 mg/day without supervision.",
    },
    {
        "name": "Metformin",
        "generic_name": "Metformin hydrochloride",
        "description": "Biguanide that lowers hepatic glucose production; first-line for type 2 diabetes.",
        "category": "Antidiabetic",
        "side_effects": ["Diarrhoea", "Nausea", "Vitamin B12 deficiency", "Lactic acidosis (rare)"],
        "contraindications": ["eGFR below 30 mL/min/1.73 m2", "Metabolic acidosis"],
        "dosage": "500 mg once or twice daily with meals, titrated to 2000 mg/day.",
    },
    {
        "name": "Lisinopril",
        "generic_name": "Lisinopril",
        "description": "ACE inhibitor used for hypertension and heart failure.",
        "category": "ACE Inhibitor",
        "side_effects": ["Dry cough", "Hyperkalaemia", "Dizziness", "Angioedema (rare)"],
        "contraindications": ["History of angioedema", "Pregnancy", "Bilateral renal artery stenosis"],
        "dosage": "10 mg once daily, adjusted up to 40 mg.",
    },
    {
        "name": "Simvastatin",
        "generic_name": "Simvastatin",
        "description": "HMG-CoA reductase inhibitor for lowering LDL cholesterol.",
        "category": "Statin",
        "side_effects": ["Myalgia", "Raised liver enzymes", "Rhabdomyolysis (rare)"],
        "contraindications": ["Active liver disease", "Pregnancy", "Strong CYP3A4 inhibitors"],
        "dosage": "10-40 mg once daily in the evening.",
    },
    {
        "name": "Clarithromycin",
        "generic_name": "Clarithromycin",
        "description": "Macrolide antibiotic and strong CYP3A4 inhibitor.",
        "category": "Antibiotic",
        "side_effects": ["Taste disturbance", "Nausea", "QT prolongation"],
        "contraindications": ["QT prolongation", "Concomitant simvastatin or lovastatin"],
        "dosage": "250-500 mg twice daily for 7-14 days.",
    },
]

SEED_INTERACTIONS = [
    {
        "drug1_name": "Aspirin",
        "drug2_name": "Warfarin",
        "interaction_type": "Pharmacodynamic (additive bleeding risk)",
        "severity": "high",
        "description": "Aspirin inhibits platelet aggregation and can irritate the gastric mucosa, "
                       "adding to warfarin's anticoagulant effect and raising the risk of serious bleeding.",
        "recommendation": "Avoid unless specifically indicated; if combined, use the lowest aspirin dose and monitor INR and bleeding.",
    },
    {
        "drug1_name": "Warfarin",
        "drug2_name": "Ibuprofen",
        "interaction_type": "Pharmacodynamic (bleeding risk)",
        "severity": "high",
        "description": "NSAIDs impair platelet function and damage the GI mucosa, increasing bleeding in anticoagulated patients.",
        "recommendation": "Prefer paracetamol for analgesia; if an NSAID is unavoidable, add gastroprotection and monitor closely.",
    },
    {
        "drug1_name": "Aspirin",
        "drug2_name": "Ibuprofen",
        "interaction_type": "Pharmacodynamic (antiplatelet antagonism)",
        "severity": "medium",
        "description": "Ibuprofen can block aspirin's access to platelet COX-1 and reduce its cardioprotective effect.",
        "recommendation": "Take immediate-release aspirin at least 30 minutes before ibuprofen, or avoid regular ibuprofen.",
    },
    {
        "drug1_name": "Lisinopril",
        "drug2_name": "Ibuprofen",
        "interaction_type": "Pharmacodynamic (reduced antihypertensive effect, renal risk)",
        "severity": "medium",
        "description": "NSAIDs blunt the blood-pressure lowering effect of ACE inhibitors and can impair renal function.",
        "recommendation": "Monitor blood pressure, renal function and potassium; limit NSAID duration.",
    },
    {
        "drug1_name": "Metformin",
        "drug2_name": "Lisinopril",
        "interaction_type": "Pharmacodynamic (glucose lowering)",
        "severity": "low",
        "description": "ACE inhibitors may modestly enhance insulin sensitivity and the glucose-lowering effect of metformin.",
        "recommendation": "No dose change usually required; watch for hypoglycaemia when starting therapy.",
    },
    {
        "drug1_name": "Simvastatin",
        "drug2_name": "Clarithromycin",
        "interaction_type": "Pharmacokinetic (CYP3A4 inhibition)",
        "severity": "high",
        "description": "Clarithromycin strongly inhibits CYP3A4, greatly increasing simvastatin exposure and the risk of rhabdomyolysis.",
        "recommendation": "Contraindicated; suspend simvastatin for the duration of clarithromycin therapy.",
    },
]


def seed_database(store, clear: bool = False) -> dict:
    """
    Insert the seed records through *store*. Drugs and pairs that already
    exist are skipped. Returns counts of created and skipped records.
    """
    if clear:
        store.clear()
        logger.info("Cleared existing drugs and interactions")

    summary = {"drugsCreated": 0, "drugsSkipped": 0, "interactionsCreated": 0, "interactionsSkipped": 0}

    drugs_by_name = {}
    for data in SEED_DRUGS:
        existing = store.find_drug_by_name(data["name"])
        if existing:
            logger.info("Drug '%s' already exists, skipping", data["name"])
            summary["drugsSkipped"] += 1
            drugs_by_name[data["name"]] = existing
            continue
        drug = store.create_drug({**data, "source": "manual"})
        drugs_by_name[drug.name] = drug
        summary["drugsCreated"] += 1
        logger.info("Seeded drug %s (id=%s)", drug.name, drug.id)

    for data in SEED_INTERACTIONS:
        drug1 = drugs_by_name.get(data["drug1_name"])
        drug2 = drugs_by_name.get(data["drug2_name"])
        if drug1 is None or drug2 is None:
            logger.warning("Skipping interaction %s - %s: drug missing", data["drug1_name"], data["drug2_name"])
            summary["interactionsSkipped"] += 1
            continue
        if store.find_interaction_between(drug1.id, drug2.id):
            logger.info("Interaction %s - %s already exists, skipping", drug1.name, drug2.name)
            summary["interactionsSkipped"] += 1
            continue
        fields = {k: v for k, v in data.items() if k not in ("drug1_name", "drug2_name")}
        try:
            store.create_interaction(drug1, drug2, {**fields, "source": "database"})
        except Conflict:
            logger.info("Interaction %s - %s inserted concurrently, skipping", drug1.name, drug2.name)
            summary["interactionsSkipped"] += 1
            continue
        summary["interactionsCreated"] += 1

    logger.info("Seeding finished %s", summary)
    return summary
