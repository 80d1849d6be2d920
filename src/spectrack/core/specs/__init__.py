"""
spectrack specs module.

Loads specification documents (Markdown with a YAML header) from the
specs tree and writes remote item IDs back into their headers.

Directory convention:
- specs/E02/E02.spec.md
- specs/E02/F01/E02-F01.spec.md
- specs/E02/F01/T01/E02-F01-T01.spec.md
- specs/E02/F01/T01/S01/E02-F01-T01-S01.spec.md
- specs/E02/F01/T01/X01/E02-F01-T01-X01.spec.md

``archive`` directories are never scanned.
"""

from spectrack.core.specs.loader import (
    DEFAULT_SUFFIX,
    MissingSourceDocumentError,
    SpecTree,
    SpecTreeLoader,
    load_spec_tree,
    split_document,
)
from spectrack.core.specs.models import REMOTE_ID_FIELD, SpecNode
from spectrack.core.specs.writeback import SpecWriter, WriteBackOutcome, write_remote_id

__all__ = [
    # Models
    "SpecNode",
    "REMOTE_ID_FIELD",
    # Loader
    "DEFAULT_SUFFIX",
    "MissingSourceDocumentError",
    "SpecTree",
    "SpecTreeLoader",
    "load_spec_tree",
    "split_document",
    # Write-back
    "SpecWriter",
    "WriteBackOutcome",
    "write_remote_id",
]
