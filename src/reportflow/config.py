"""Runtime settings for reportflow.

credentials and transport knobs come from the environment (or a .env file)
so they never end up in the report yaml that gets committed next to the
pipeline. one Settings instance is built per step and passed down - nothing
reads the environment after that.
"""

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from reportflow.exceptions import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REPORTFLOW_",
        env_file=".env",
        extra="ignore",
    )

    # Credentials - web services user ("user:company") and shared secret
    username: str = ""
    secret: SecretStr = SecretStr("")

    # Endpoint
    endpoint: str = "api2.omniture.com"
    api_version: str = "1.4"

    # Polling
    poll_interval: float = 3.0  # seconds between Report.Get attempts
    request_timeout: float = 30.0

    @field_validator("endpoint")
    @classmethod
    def strip_scheme(cls, v: str) -> str:
        # people paste full urls from the admin console
        for prefix in ("https://", "http://"):
            if v.startswith(prefix):
                v = v[len(prefix):]
        return v.rstrip("/")

    @property
    def base_url(self) -> str:
        return f"https://{self.endpoint}/admin/{self.api_version}/rest/"

    def require_credentials(self) -> None:
        """Raise ConfigurationError unless both username and secret are set."""
        missing = []
        if not self.username:
            missing.append("username")
        if not self.secret.get_secret_value():
            missing.append("secret")
        if missing:
            raise ConfigurationError(
                f"Missing credentials: {', '.join(missing)} "
                "(set REPORTFLOW_USERNAME / REPORTFLOW_SECRET)",
                missing=missing,
            )
