"""Client configuration"""

import re

from pydantic import BaseModel, ConfigDict, field_validator

LOCAL_HOST_PATTERN = re.compile(r"localhost|127\.0\.0\.1")
DEFAULT_STORAGE_URL = "sqlite:///icchess_client.db"


class ClientConfig(BaseModel):
    """Where the game service lives and where the page keeps its local state."""

    model_config = ConfigDict(frozen=True)

    host: str
    canister_id: str
    storage_url: str = DEFAULT_STORAGE_URL
    request_timeout: float = 10.0

    @field_validator("host")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def is_local(self) -> bool:
        """Local replica / development host, which needs its root key fetched before calls are trusted."""
        return LOCAL_HOST_PATTERN.search(self.host) is not None
