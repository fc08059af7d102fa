from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class HttpResponse:
    """HTTP response data."""

    url: str
    status_code: int
    headers: Dict[str, str]
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300
