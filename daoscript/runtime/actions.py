"""
daoscript Actions

Commands produce ordered sequences of actions. Ordering is the eventual
execution order and is preserved end-to-end.

Key classes:
- TransactionAction: target address, calldata, optional value
- ProviderAction: request to switch execution context (e.g. network)
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class TransactionAction:
    to: str
    data: str
    value: int = 0
    from_: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": "transaction", "to": self.to, "data": self.data}
        if self.value:
            out["value"] = str(self.value)
        if self.from_:
            out["from"] = self.from_
        return out


@dataclass(frozen=True)
class ProviderAction:
    method: str
    params: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "provider", "method": self.method, "params": list(self.params)}


Action = Union[TransactionAction, ProviderAction]


def is_provider_action(action: Action) -> bool:
    return isinstance(action, ProviderAction)


def actions_to_dicts(actions: List[Action]) -> List[Dict[str, Any]]:
    return [a.to_dict() for a in actions]


def compute_actions_digest(actions: List[Action]) -> str:
    """Digest of the ordered action list over its canonical JSON form."""
    canon = json.dumps(actions_to_dicts(actions), sort_keys=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(canon.encode("utf-8")).hexdigest()
