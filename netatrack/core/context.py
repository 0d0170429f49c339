"""
Request-scoped caller context

Built once per request by netatrack.api.deps.get_request_context and passed
explicitly to the workflows that branch on who is calling.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    user_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    is_admin: bool = False
    request_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @classmethod
    def anonymous(cls, request_id: Optional[str] = None) -> "RequestContext":
        return cls(request_id=request_id)
