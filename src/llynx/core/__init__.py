from __future__ import annotations

from . import config, errors, formatter


__all__ = [
    'config',
    'errors',
    'formatter',
    ]
