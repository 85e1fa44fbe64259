"""Pydantic models shared by the session and display layers."""

from pydantic import BaseModel, ConfigDict, Field


class Endpoint(BaseModel):
    """Externally reachable address of the note, composed once the listener is bound."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(min_length=1)
    """Address a reader can reach (usually the outbound interface)"""
    port: int = Field(ge=1, le=65535)
    """Port the OS assigned to the listener"""
    path_token: str = Field(min_length=1)
    """Secret path segment, without the leading slash"""

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"http://{host}:{self.port}/{self.path_token}"
