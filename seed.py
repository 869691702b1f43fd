import argparse
import asyncio
from pathlib import Path

from loguru import logger
from sqlmodel.ext.asyncio.session import AsyncSession

from pokedle.core.db import engine, init_models
from pokedle.schemas.catalog import CatalogSeed
from pokedle.services.catalog import CatalogService
from pokedle.utils.logging import setup_logging


async def main(path: Path) -> None:
    seed = CatalogSeed.model_validate_json(path.read_text(encoding="utf-8"))
    await init_models()

    async with AsyncSession(engine, expire_on_commit=False) as session:
        service = CatalogService(session)
        existing = await service.count_cards()
        if existing:
            logger.error(f"Catalog already holds {existing} cards, refusing to load {path}")
        else:
            summary = await service.load_catalog(seed)
            if summary.placeholder_pokemon:
                logger.warning(
                    f"Placeholder cards created for: {', '.join(summary.placeholder_pokemon)}"
                )

    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load biomes, pokemon, spawns and cards")
    parser.add_argument("path", type=Path, help="Catalog seed JSON file")
    args = parser.parse_args()

    setup_logging("seed.log")
    asyncio.run(main(args.path))
