"""Utility functions for the garden package.

    from garden.utils import isodatetime, uid
    timestamp = isodatetime.to_timestamp(now)
    doc_id = uid.generate_id()
"""

from . import isodatetime, uid

__all__ = ["isodatetime", "uid"]
