"""
JSON persistence for the retrieval store.
The durable file is a single array of {id, content, embedding, metadata, timestamp} objects.
"""

import json
import os
import stat
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

from src.core.errors import PersistenceError

from .types import Record


def _file_mode(target: Path) -> int:
    """Keep the existing file mode, or use the umask default for a new file."""
    if target.exists():
        return stat.S_IMODE(target.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def save_records(path: str, records: Sequence[Record]) -> None:
    """
    Overwrite the durable file with the full record list.

    The payload is written to a temporary sibling and moved into place, so a
    failed write never leaves a truncated file behind.
    """
    target = Path(path)
    payload = [record.to_dict() for record in records]

    tmp_name = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        os.chmod(tmp_name, _file_mode(target))
        os.replace(tmp_name, target)
        tmp_name = None
    except (OSError, TypeError, ValueError) as e:
        raise PersistenceError(f"Failed to save vector store to {target}: {e}") from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.remove(tmp_name)


def _record_from_entry(position: int, entry: object, dimension: Optional[int]) -> Record:
    if not isinstance(entry, dict):
        raise PersistenceError(f"Entry {position} is not an object")

    content = entry.get('content')
    embedding = entry.get('embedding')
    if not isinstance(content, str) or not content:
        raise PersistenceError(f"Entry {position} has no content")
    if not isinstance(embedding, list) or not embedding:
        raise PersistenceError(f"Entry {position} has no embedding")
    if dimension is not None and len(embedding) != dimension:
        raise PersistenceError(
            f"Entry {position} embedding dimension {len(embedding)} does not match expected dimension {dimension}"
        )

    metadata = entry.get('metadata')
    if metadata is not None and not isinstance(metadata, dict):
        raise PersistenceError(f"Entry {position} metadata is not an object")

    try:
        vector = [float(v) for v in embedding]
    except (TypeError, ValueError) as e:
        raise PersistenceError(f"Entry {position} embedding is not numeric") from e

    # Legacy entries without metadata normalize to the general field
    return Record(
        id=str(entry.get('id') or f"chunk_{position}"),
        content=content,
        embedding=vector,
        metadata=metadata or {},
        timestamp=entry.get('timestamp'),
    )


def load_records(path: str, dimension: Optional[int] = None) -> Optional[List[Record]]:
    """
    Read the durable file.

    Returns:
        The stored records in file order, or None when the file is missing, empty or holds no records
    """
    target = Path(path)
    if not target.exists():
        return None

    try:
        raw = target.read_text(encoding='utf-8')
    except OSError as e:
        raise PersistenceError(f"Failed to read vector store from {target}: {e}") from e

    if not raw.strip():
        return None

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Vector store file {target} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise PersistenceError(f"Vector store file {target} must contain a JSON array")

    # A build that skipped every chunk writes []; callers rebuild from it
    if not data:
        return None

    records = [_record_from_entry(position, entry, dimension) for position, entry in enumerate(data)]

    ids = [record.id for record in records]
    if len(set(ids)) != len(ids):
        raise PersistenceError(f"Vector store file {target} contains duplicate record ids")

    return records


def remove_file(path: str) -> bool:
    """Delete the durable file if present. Returns True when a file was removed."""
    target = Path(path)
    try:
        if target.exists():
            target.unlink()
            return True
    except OSError as e:
        raise PersistenceError(f"Failed to remove vector store file {target}: {e}") from e
    return False
