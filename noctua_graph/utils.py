"""Generic helpers (ids, cloning, IRIs, profiling)."""

from __future__ import annotations

import copy
import functools
import logging
import time
import uuid
from typing import Any, Optional

from noctua_graph.config import CONFIG, OBO

logger = logging.getLogger(__name__)


def generate_id() -> str:
    """Return a process-unique opaque identifier."""
    return uuid.uuid4().hex


def clone_data(data: Any) -> Any:
    return copy.deepcopy(data)


def is_list(value: Any) -> bool:
    return isinstance(value, list)


def profile_time(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        elapsed = time.time() - start_time
        logger.debug("[PROFILE] Function '%s' executed in %.3f seconds", func.__name__, elapsed)
        return result

    return wrapper


def expand_curie(curie: Any) -> Optional[str]:
    """
    Expand a CURIE into a full IRI using CONFIG['NAMESPACES'].

    Full IRIs pass through untouched. Unknown prefixes are treated as OBO
    ontologies (``GO:0003674`` -> ``http://purl.obolibrary.org/obo/GO_0003674``).
    Returns None for values that are neither.
    """
    if not isinstance(curie, str):
        return None
    text = curie.strip()
    if not text:
        return None
    if text.startswith(("http://", "https://", "urn:")):
        return text
    if ":" not in text:
        return None
    prefix, local = text.split(":", 1)
    base = CONFIG["NAMESPACES"].get(prefix)
    if base:
        return base + local
    return f"{OBO}{prefix}_{local}"
