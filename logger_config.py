"""
Logging setup shared by the CLI and the Streamlit app.
"""
from __future__ import annotations

import logging
from typing import Union

LOG_FORMAT = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Configure the root logger with a single console handler.
    Safe to call more than once (Streamlit reruns the script).
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, "_stack_analyzer", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._stack_analyzer = True
        root.addHandler(handler)

    return root
