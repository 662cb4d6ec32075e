"""
LifeTune — Entry Point.

Single entry point: `python main.py` starts the Telegram bot.
The advice proxy runs separately: `uvicorn src.api.openai_proxy:app`.
"""

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from src.bot.telegram_bot import main

if __name__ == "__main__":
    main()
