"""
Postal code catalog import.

Replaces the postal code master list of one country with the contents of
a tab-separated export, e.g.:

    python -m pantabilen.seed_postal_codes SE.txt --country Sweden

Existing tenant coverage for that country is removed together with the
old catalog. Run after the database is set up.
"""

import argparse
import asyncio
import logging
from pathlib import Path

from sqlalchemy import delete, insert, select

from pantabilen.app.core.config import settings
from pantabilen.app.core.observability import configure_logging
from pantabilen.app.db.session import AsyncSessionLocal
from pantabilen.app.domain.coverage.coverage_set import batched
from pantabilen.app.domain.coverage.postal_catalog import parse_catalog
from pantabilen.app.models.postal_code import PostalCode, TenantCoverageArea

logger = logging.getLogger("pantabilen.seed")

IMPORT_BATCH_SIZE = 1000


async def seed_postal_codes(path: Path, country: str) -> int:
    """
    Import the catalog in `path` for `country`.
    
    Returns:
        Number of imported postal codes
    """
    with path.open(encoding="utf-8") as handle:
        catalog = parse_catalog(handle, country)
    
    for error in catalog.errors:
        logger.warning(error)
    if not catalog.rows:
        raise SystemExit("Inga giltiga postnummer hittades")
    
    async with AsyncSessionLocal() as db:
        print(f"🌱 Importing {len(catalog.rows)} postal codes for {country}...")
        
        old_ids = select(PostalCode.id).where(PostalCode.country == country)
        await db.execute(delete(TenantCoverageArea).where(TenantCoverageArea.postal_code_id.in_(old_ids)))
        await db.execute(delete(PostalCode).where(PostalCode.country == country))
        
        for batch in batched(catalog.rows, IMPORT_BATCH_SIZE):
            await db.execute(insert(PostalCode), batch)
        
        await db.commit()
    
    print(f"✅ Imported {len(catalog.rows)} postal codes ({catalog.with_coordinates} with coordinates)")
    if catalog.errors:
        print(f"⚠️  Skipped {len(catalog.errors)} lines")
    return len(catalog.rows)


def main():
    parser = argparse.ArgumentParser(description="Import a postal code catalog")
    parser.add_argument("path", type=Path, help="Tab-separated postal code export")
    parser.add_argument("--country", default="Sweden", help="Country the codes belong to")
    args = parser.parse_args()
    
    configure_logging(settings.log_level)
    asyncio.run(seed_postal_codes(args.path, args.country))


if __name__ == "__main__":
    main()
