import os
import sys

from loguru import logger


def setup_logger(*, json_logs: bool = False, level: str = "INFO") -> None:
    """Configure loguru for the pipeline.

    Console level controlled by LOG_LEVEL env (default: INFO).
    File keeps DEBUG so a failed cron tick can be traced per item.
    """
    console_level = os.getenv("LOG_LEVEL", level).upper()
    json_logs = json_logs or os.getenv("LOG_JSON", "") == "1"
    logger.remove()

    if json_logs:
        logger.add(sys.stdout, serialize=True, level=console_level)
    else:
        logger.add(
            sys.stdout,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
                "<level>{message}</level>"
            ),
            level=console_level,
            colorize=True,
        )

    logger.add(
        "logs/pipeline_{time:YYYY-MM-DD}.log",
        rotation="00:00",
        retention="7 days",
        compression="gz",
        level="DEBUG",
        serialize=json_logs,
    )
