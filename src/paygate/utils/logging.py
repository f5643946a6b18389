import logging
from typing import Optional

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO", logger: Optional[logging.Logger] = None) -> logging.Logger:
    """Attach a stream handler to the paygate logger once and set its level."""
    target = logger or logging.getLogger("paygate")
    target.setLevel(level.upper())
    if not any(getattr(h, "_paygate", False) for h in target.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._paygate = True  # type: ignore[attr-defined]
        target.addHandler(handler)
    return target
