from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Presence Light Controller"

    # Device transport: "lan" talks to a Govee light, "sim" for development
    mode: str = Field(default="lan")

    # Hue bridge
    hue_host: str = ""
    hue_api_key: str = ""
    hue_motion_ids: list[str] = Field(default_factory=list)
    hue_light_level_ids: list[str] = Field(default_factory=list)  # paired by position with motion ids
    hue_button_id: str = ""
    hue_verify_tls: bool = False  # bridge uses a self-signed certificate
    hue_timeout_seconds: float = 10.0
    hue_reconnect_s: float = 5.0

    # Govee LAN API
    govee_device_ip: str = ""  # empty = discover via multicast scan
    govee_local_port: int = 4002
    govee_device_port: int = 4003
    govee_multicast_addr: str = "239.255.255.250"
    govee_multicast_port: int = 4001
    govee_retry_s: float = 1.0
    govee_discovery_timeout_s: float = 3.0

    # Decision engine
    darkness_threshold: float = 8500
    on_time_seconds: float = 120.0

    # Device status polling
    status_poll_ms: int = 666
    status_stale_after_s: float = 5.0
    status_wait_s: float = 2.0

    # Process
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    log_file: str = "presence_light.log"
    log_level: str = "INFO"


settings = Settings()
