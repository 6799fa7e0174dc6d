from __future__ import annotations

from typing import Any

import json

from pydantic import BaseModel


def _default(obj: Any) -> Any:
    # drafts kept in dialog state are pydantic models
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), default=_default)


def loads(s: str | None) -> Any:
    if not s:
        return None
    return json.loads(s)
