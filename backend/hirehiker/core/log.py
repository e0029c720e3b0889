import logging


def get_service_logger(name: str, tag: str) -> logging.Logger:
    """
    Create a named service logger with its own console handler.

    Output is prefixed with the service tag so interleaved request logs
    stay readable in the terminal, e.g. "[ASSISTANT] Sending request".
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(f"[{tag}] %(levelname)s %(message)s"))
        logger.addHandler(handler)

    return logger
