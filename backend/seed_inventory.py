"""Seed a demo pharmacy: suppliers and a starter drug catalog.

Stock is entered in packs here and stored in units.
"""
from datetime import date, timedelta

from pharmaflow.db.init_db import init_db
from pharmaflow.db.session import SessionLocal
from pharmaflow.models.drug import Drug
from pharmaflow.services import inventory_service, supplier_service

SUPPLIERS = [
    {"name": "United Pharma Distribution", "contact_person": "Sales desk", "phone": "+20 2 2575 1000"},
    {"name": "Ibnsina Pharma", "contact_person": "Order line", "phone": "+20 2 3539 2000"},
]

# name, generic, category, dosage form, pack price, cost price, units per pack, packs, months to expiry
DRUGS = [
    ("Panadol 500mg", "Paracetamol", "Analgesic", "Tablet", 45.00, 36.00, 24, 40, 18),
    ("Panadol Extra", "Paracetamol + Caffeine", "Analgesic", "Tablet", 62.00, 50.00, 24, 30, 14),
    ("Brufen 400mg", "Ibuprofen", "NSAID", "Tablet", 58.00, 46.50, 30, 25, 20),
    ("Augmentin 1g", "Amoxicillin + Clavulanic acid", "Antibiotic", "Tablet", 190.00, 152.00, 14, 15, 10),
    ("Flagyl 500mg", "Metronidazole", "Antibiotic", "Tablet", 38.00, 30.00, 20, 20, 16),
    ("Antinal", "Nifuroxazide", "Antidiarrheal", "Capsule", 32.00, 25.60, 24, 35, 12),
    ("Glucophage 850mg", "Metformin", "Antidiabetic", "Tablet", 51.00, 40.80, 50, 30, 24),
    ("Concor 5mg", "Bisoprolol", "Cardiovascular", "Tablet", 96.00, 76.80, 30, 12, 22),
    ("Nexium 40mg", "Esomeprazole", "Gastrointestinal", "Tablet", 168.00, 134.40, 14, 10, 18),
    ("Claritine", "Loratadine", "Antihistamine", "Syrup", 54.00, 43.20, 1, 18, 9),
    ("Otrivin 0.1%", "Xylometazoline", "Nasal decongestant", "Spray", 41.00, 32.80, 1, 22, 2),
    ("Cataflam 50mg", "Diclofenac potassium", "NSAID", "Tablet", 72.00, 57.60, 20, 8, 15),
]


def seed_inventory():
    init_db()
    db = SessionLocal()
    try:
        if db.query(Drug).count():
            print("Inventory already seeded, nothing to do.")
            return

        suppliers = [supplier_service.create_supplier(db, data) for data in SUPPLIERS]
        today = date.today()
        for i, (name, generic, category, form, price, cost, upp, packs, months) in enumerate(DRUGS):
            inventory_service.create_drug(db, {
                "name": name,
                "generic_name": generic,
                "category": category,
                "dosage_form": form,
                "price": price,
                "cost_price": cost,
                "units_per_pack": upp,
                "stock": packs * upp,
                "expiry_date": today + timedelta(days=30 * months),
                "supplier_id": suppliers[i % len(suppliers)].id,
            })
        print(f"Seeded {len(DRUGS)} drugs from {len(suppliers)} suppliers.")
    finally:
        db.close()


if __name__ == "__main__":
    seed_inventory()
