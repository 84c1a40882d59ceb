from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # General
    LOG_LEVEL: str = "INFO"
    COLLECTOR_MODE: str = "production"

    # NIBE Uplink
    NIBE_CLIENT_ID: str = ""
    NIBE_CLIENT_SECRET: SecretStr = SecretStr("")
    NIBE_ACCESS_TOKEN: SecretStr = SecretStr("")
    NIBE_REFRESH_TOKEN: SecretStr = SecretStr("")
    NIBE_SYSTEM_ID: str = ""
    NIBE_API_BASE_URL: str = "https://api.nibeuplink.com"
    NIBE_HTTP_TIMEOUT: float = 30.0
    POLL_INTERVAL_MS: int = 300000

    # Parameter IDs (NIBE F-series defaults)
    OUTDOOR_TEMP_ID: str = "40004"
    ROOM_TEMP_ID: str = "40033"
    RETURN_TEMP_ID: str = "40012"
    CALCULATED_FLOW_TEMP_ID: str = "43009"
    HEAT_MEDIUM_FLOW_ID: str = "40008"
    ELECTRICAL_ADDITION_POWER_ID: str = "43084"

    # Raw values are divided by this before they are stored.
    # NIBE reports most readings in tenths (205 -> 20.5). Use 1.0 to store raw values.
    VALUE_SCALE_FACTOR: float = Field(10.0, gt=0)

    # Persistence
    STORAGE_BACKEND: str = "sqlite"
    SQLITE_DB_PATH: str = "nibe_stats.db"

    # InfluxDB
    INFLUXDB_URL: str = "http://influxdb:8086"
    INFLUXDB_TOKEN: SecretStr = SecretStr("")
    INFLUXDB_ORG: str = "home"
    INFLUXDB_BUCKET: str = "nibe_raw"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def poll_interval_seconds(self) -> float:
        return self.POLL_INTERVAL_MS / 1000.0


settings = Settings()
