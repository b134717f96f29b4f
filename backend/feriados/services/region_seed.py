"""Region seeding.

Loads states and municipalities from ``code,name`` CSV files (one header
line) into the ``regions`` table. Toggles start switched off. Codes that
are already present are skipped, so the load can run on every startup.
"""

import csv
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feriados.models.region import Region, parent_state_code

logger = logging.getLogger(__name__)

BATCH_SIZE = 500


def read_region_rows(path: Path) -> Iterator[tuple[str, str]]:
    """Yield ``(code, name)`` pairs, skipping the header and blank rows."""
    with path.open(encoding="utf-8", newline="") as fh:
        reader = csv.reader(fh)
        next(reader, None)
        for row in reader:
            if len(row) < 2:
                continue
            code, name = row[0].strip(), row[1].strip()
            if code and name:
                yield code, name


def _batches(rows: Iterable[tuple[str, str]], size: int) -> Iterator[list[tuple[str, str]]]:
    batch: list[tuple[str, str]] = []
    for row in rows:
        batch.append(row)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch


async def seed_regions(db: AsyncSession, rows: Iterable[tuple[str, str]]) -> int:
    """Insert regions that do not exist yet. Returns the number inserted."""
    inserted = 0
    for batch in _batches(rows, BATCH_SIZE):
        codes = [code for code, _ in batch]
        existing = set(
            (await db.execute(select(Region.code).where(Region.code.in_(codes)))).scalars()
        )
        for code, name in batch:
            if code in existing:
                continue
            db.add(Region(
                code=code,
                name=name,
                state=parent_state_code(code),
                carnaval=False,
                corpus_christi=False,
            ))
            existing.add(code)
            inserted += 1
        await db.flush()
    return inserted


async def seed_from_files(db: AsyncSession, *paths: str) -> int:
    """Seed from each CSV file in order. Missing files are skipped."""
    total = 0
    for raw_path in paths:
        path = Path(raw_path)
        if not path.is_file():
            logger.warning("Region seed file %s not found – skipping", path)
            continue
        count = await seed_regions(db, read_region_rows(path))
        logger.info("Region seed: %d regions loaded from %s", count, path)
        total += count
    return total
