from __future__ import annotations

from loguru import logger
from tqdm import tqdm


def setup_logger(logging_level: int) -> None:
    """
    Configure logger with clean format.

    Log lines are routed through `tqdm.write` so they do not break an
    active progress bar.

    Args:
        logging_level (int): Loguru logging level (20=INFO, 10=DEBUG)
    """
    logger.remove()

    # Show module info only at DEBUG level (10 or lower)
    if logging_level <= 10:
        log_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )
    else:
        log_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<level>{message}</level>"
        )

    logger.add(
        lambda msg: tqdm.write(msg, end=""),
        format=log_format,
        colorize=True,
        level=logging_level,
    )


def validate_swarm_width(n: int) -> None:
    """
    Check that a swarm width is a non-negative integer.

    Args:
        n (int): Number of concurrent tasks

    Raises:
        ValueError: If `n` is not an integer or is negative
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise ValueError(f"Swarm width must be an integer, got {type(n).__name__}")
    if n < 0:
        raise ValueError(f"Swarm width must be >= 0, got {n}")
