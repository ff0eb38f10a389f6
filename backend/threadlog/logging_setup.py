from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a single stream handler to the root logger."""
    logger = logging.getLogger()  # root
    logger.setLevel(level)

    # avoid duplicate handlers when create_app runs more than once (tests)
    if not any(getattr(h, "_threadlog", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._threadlog = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
