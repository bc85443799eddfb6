"""Connection profile model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ConnectionProfile(BaseModel):
    """Named bundle of server address, ports, protocol choice and credentials.

    Immutable once loaded; every call of a session reads the same instance.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1, description="Unique profile name.")
    server: str = Field(..., min_length=1, description="Management server host name or address.")
    secure_port: int = Field(default=8443, ge=1, le=65535, alias="securePort")
    unsecure_port: int = Field(default=8080, ge=1, le=65535, alias="unsecurePort")
    use_ssl: bool = Field(default=False, alias="useSSL")
    api_key: str = Field(..., min_length=1, alias="apiKey")
    secret_key: str = Field(..., min_length=1, alias="secretKey", repr=False)

    @property
    def scheme(self) -> str:
        return "https" if self.use_ssl else "http"

    @property
    def port(self) -> int:
        return self.secure_port if self.use_ssl else self.unsecure_port

    def endpoint(self, path: str) -> str:
        return f"{self.scheme}://{self.server}:{self.port}{path}"

    @property
    def base_url(self) -> str:
        """URL of the generic API endpoint."""
        return self.endpoint("/client/api")

    @property
    def console_url(self) -> str:
        """URL of the console proxy endpoint."""
        return self.endpoint("/client/console")

    def to_dict(self) -> dict:
        """Serialize using the on-disk (camelCase) field names."""
        return self.model_dump(by_alias=True)
