"""Initialize the ibadgram database without running migrations."""

import asyncio

from ibadgram.config import load_config
from ibadgram.db.session import init_models


async def _create_tables() -> None:
    config = load_config()
    try:
        await init_models(config.engine)
    finally:
        await config.engine.dispose()


def main() -> None:
    asyncio.run(_create_tables())
    print("Database initialized.")


if __name__ == "__main__":
    main()
