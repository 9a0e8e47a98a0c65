from __future__ import annotations

from typing import Any, Dict

Document = Dict[str, Any]

# model name -> document id -> document body (without "_id")
StoreData = Dict[str, Dict[str, Document]]
