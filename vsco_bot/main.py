"""Application entry point.

Main module that initializes and runs the Telegram bot application. Handles both
webhook mode (for deployments with a public domain) and polling mode (for local
development). Configures logging and registers bot handlers for commands and
message processing.
"""

import logging

from telegram.ext import Application, CommandHandler, MessageHandler, filters

from .bot.handlers import error_handler, handle_message, help_command, start
from .config import config

# Logging
logging.basicConfig(
    format="%(asctime)s - %(levelname)s - %(message)s",
    level=getattr(logging, config.bot.log_level.upper(), logging.INFO),
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("telegram").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def build_application(token: str) -> Application:
    """Create the Telegram application with all handlers registered.

    Args:
        token: Telegram bot API token.

    Returns:
        Configured Application instance.
    """
    app = Application.builder().token(token).build()

    app.add_handler(CommandHandler("start", start))
    app.add_handler(CommandHandler("help", help_command))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))
    app.add_error_handler(error_handler)

    return app


def main() -> None:
    """Main application entry point.

    Initializes the Telegram bot application and starts it in either webhook
    mode (public domain configured) or polling mode.

    Raises:
        RuntimeError: If BOT_TOKEN environment variable is not set.
    """
    if not config.bot.bot_token:
        raise RuntimeError("Set BOT_TOKEN environment variable")

    app = build_application(config.bot.bot_token)

    # Run in webhook or polling mode
    if config.bot.use_webhook:
        path = f"/{config.bot.bot_token}"
        webhook_url = f"https://{config.bot.webhook_domain}{path}"
        logger.info(f"Starting webhook on {config.bot.listen_host}:{config.bot.port}")

        app.run_webhook(
            listen=config.bot.listen_host,
            port=config.bot.port,
            url_path=path,
            webhook_url=webhook_url,
        )
    else:
        logger.warning("No public domain found; falling back to long-polling")
        app.run_polling()


if __name__ == "__main__":
    main()
