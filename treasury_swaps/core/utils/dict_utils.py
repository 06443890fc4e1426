from typing import Dict, List, Mapping, Optional, Sequence, Union

JSONScalar = Union[str, int, float, bool, None]
JSON = Union[JSONScalar, Dict[str, "JSON"], List["JSON"]]


def _read_path(node: object, path: Sequence[Union[str, int]]) -> Optional[object]:
    """
    Traverse a nested structure of dicts/lists using a path of keys/indices.

    Returns None as soon as a key or index is missing.
    """
    current: object = node
    for part in path:
        if isinstance(part, int):
            if isinstance(current, list) and 0 <= part < len(current):
                current = current[part]
            else:
                return None
        else:
            if isinstance(current, Mapping) and part in current:
                current = current[part]
            else:
                return None
    return current
