from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


class RequestInfo(BaseModel):
    headers: Dict[str, Union[str, List[str]]] = Field(default_factory=dict)
    method: str
    url: str


class EnvironmentSnapshot(BaseModel):
    env: Dict[str, str]
    ips: Dict[str, str]
    req: Optional[RequestInfo] = None
