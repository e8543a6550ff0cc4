"""
Versioned data migrations.

Each migration runs once, in increasing version order, and is recorded in
schema_migrations. Migrations that rewrite inventory store a snapshot of
the drugs table first so they can be rolled back.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List

from sqlalchemy.orm import Session

from pharmaflow.models.app_state import MigrationBackup, SchemaMigration
from pharmaflow.models.drug import Drug
from pharmaflow.services.inventory_service import INTERNAL_CODE_PATTERN, validate_stock

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = ("internal_code", "stock", "units_per_pack")

# Below this, a stored stock value is taken to be a pack count
PACK_COUNT_CEILING = 1000


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    upgrade: Callable[[Session], int]
    snapshot: bool = True


def normalize_internal_codes(db: Session) -> int:
    """Codes that are not six digits become the drug's 1-based position, zero padded."""
    changed = 0
    for position, drug in enumerate(db.query(Drug).order_by(Drug.id).all(), start=1):
        if drug.internal_code and INTERNAL_CODE_PATTERN.match(drug.internal_code):
            continue
        drug.internal_code = str(position).zfill(6)
        changed += 1
    return changed


def stock_to_units(db: Session) -> int:
    """Convert pack-count stock values to units."""
    changed = 0
    for drug in db.query(Drug).order_by(Drug.id).all():
        stock = drug.stock or 0
        if stock >= PACK_COUNT_CEILING and float(stock).is_integer():
            continue
        drug.stock = validate_stock(stock * (drug.units_per_pack or 1))
        changed += 1
    return changed


MIGRATIONS: List[Migration] = [
    Migration(1, "normalize_internal_codes", normalize_internal_codes),
    Migration(2, "stock_to_units", stock_to_units),
]


def applied_versions(db: Session) -> set[int]:
    return {row.version for row in db.query(SchemaMigration.version).all()}


def _snapshot(db: Session, version: int) -> None:
    payload = [
        {"id": drug.id, **{field: getattr(drug, field) for field in SNAPSHOT_FIELDS}}
        for drug in db.query(Drug).order_by(Drug.id).all()
    ]
    db.add(MigrationBackup(version=version, payload=payload))


def run_migrations(db: Session, migrations: List[Migration] | None = None) -> List[int]:
    """Apply pending migrations. Returns the versions applied."""
    done = applied_versions(db)
    applied = []
    for migration in sorted(migrations or MIGRATIONS, key=lambda m: m.version):
        if migration.version in done:
            continue
        try:
            if migration.snapshot:
                _snapshot(db, migration.version)
            changed = migration.upgrade(db)
            db.add(SchemaMigration(version=migration.version, name=migration.name))
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(f"Migration {migration.version} ({migration.name}) failed")
            raise
        logger.info(f"Applied migration {migration.version} ({migration.name}): {changed} drug(s) changed")
        applied.append(migration.version)
    return applied


def rollback_migration(db: Session, version: int) -> int:
    """
    Restore the drugs snapshot taken before `version` and forget the migration.

    Returns the number of drugs restored.
    Raises LookupError when there is no backup for that version.
    """
    backup = (
        db.query(MigrationBackup)
        .filter(MigrationBackup.version == version)
        .order_by(MigrationBackup.id.desc())
        .first()
    )
    if not backup:
        raise LookupError(f"No backup found for migration {version}")

    restored = 0
    for row in backup.payload:
        drug = db.get(Drug, row["id"])
        if not drug:
            continue
        for field in SNAPSHOT_FIELDS:
            setattr(drug, field, row.get(field))
        restored += 1

    db.query(SchemaMigration).filter(SchemaMigration.version == version).delete()
    db.commit()
    logger.warning(f"Rolled back migration {version}: {restored} drug(s) restored")
    return restored
