"""
Owner profile chunk source.
Flattens a nested profile JSON document into field-tagged chunks for the retrieval store.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from src.core.errors import InvalidInputError

FULL_PROFILE_FIELD = "full_profile"


def _data_type(value: Any) -> str:
    if isinstance(value, list):
        return "array"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if value is None:
        return "null"
    return "string"


def _render(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(_render(item) for item in value)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def flatten_profile(data: Dict[str, Any], source: str = "owner_profile.json") -> List[Dict[str, Any]]:
    """
    Turn a nested profile into one chunk per leaf plus one full-context chunk.

    Leaf chunks read "<parent>: <key>: <value>" and carry the dotted path as
    their field. The final chunk holds the whole profile and is flagged with
    isFullContext so short queries can favour it during re-ranking.
    """
    if not isinstance(data, dict):
        raise InvalidInputError("Profile must be a JSON object")

    chunks: List[Dict[str, Any]] = []

    def walk(node: Dict[str, Any], prefix: str, field_path: str) -> None:
        for key, value in node.items():
            current_path = f"{field_path}.{key}" if field_path else key

            if isinstance(value, dict):
                walk(value, f"{prefix}{key}: ", current_path)
                continue

            chunks.append({
                "content": f"{prefix}{key}: {_render(value)}",
                "metadata": {
                    "field": current_path,
                    "dataType": _data_type(value),
                    "source": source,
                },
            })

    walk(data, "", "")

    chunks.append({
        "content": f"Full personal profile: {json.dumps(data, indent=2, ensure_ascii=False)}",
        "metadata": {
            "field": FULL_PROFILE_FIELD,
            "dataType": "object",
            "source": source,
            "isFullContext": True,
        },
    })
    return chunks


def load_profile(path: str) -> List[Dict[str, Any]]:
    """Read a profile JSON file and flatten it into chunks."""
    profile_path = Path(path)
    try:
        data = json.loads(profile_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise InvalidInputError(f"Profile file not found: {profile_path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidInputError(f"Could not read profile {profile_path}: {e}") from e

    return flatten_profile(data, source=profile_path.name)
