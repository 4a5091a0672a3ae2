import asyncio
import logging

from sleepwatch.bot import run_bot
from sleepwatch.config import TOKEN


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("aiogram").setLevel(logging.INFO)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    if not TOKEN:
        logging.error("BOT_TOKEN is not set")
        raise SystemExit(1)
    asyncio.run(run_bot(TOKEN))


if __name__ == "__main__":
    main()
