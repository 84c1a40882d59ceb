import pytest
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from pydantic import SecretStr

from nibe_stats.entrypoints.daemon import main
from nibe_stats.adapters.nibe import NibeUplinkAdapter
from nibe_stats.adapters.influxdb import InfluxDBAdapter
from nibe_stats.adapters.sqlite import SqliteAdapter
from nibe_stats.services.scheduler import Scheduler


class TestDaemonMain:
    """Test suite for the daemon main() function."""

    @pytest.fixture
    def mock_settings_production(self):
        """Mock settings for production mode."""
        with patch("nibe_stats.entrypoints.daemon.settings") as mock:
            mock.COLLECTOR_MODE = "production"
            mock.LOG_LEVEL = "INFO"
            mock.NIBE_CLIENT_ID = "client-id"
            mock.NIBE_CLIENT_SECRET = SecretStr("client-secret")
            mock.NIBE_ACCESS_TOKEN = SecretStr("seed-access")
            mock.NIBE_REFRESH_TOKEN = SecretStr("seed-refresh")
            mock.NIBE_SYSTEM_ID = "58248"
            mock.NIBE_API_BASE_URL = "https://api.nibeuplink.com"
            mock.NIBE_HTTP_TIMEOUT = 30.0
            mock.poll_interval_seconds = 300.0
            mock.OUTDOOR_TEMP_ID = "40004"
            mock.ROOM_TEMP_ID = "40033"
            mock.RETURN_TEMP_ID = "40012"
            mock.CALCULATED_FLOW_TEMP_ID = "43009"
            mock.HEAT_MEDIUM_FLOW_ID = "40008"
            mock.ELECTRICAL_ADDITION_POWER_ID = "43084"
            mock.VALUE_SCALE_FACTOR = 10.0
            mock.STORAGE_BACKEND = "sqlite"
            mock.SQLITE_DB_PATH = "test.db"
            mock.INFLUXDB_URL = "http://influxdb:8086"
            mock.INFLUXDB_TOKEN = SecretStr("test_token")
            mock.INFLUXDB_ORG = "home"
            mock.INFLUXDB_BUCKET = "nibe_raw"
            yield mock

    @pytest.fixture
    def mock_adapters(self):
        """Mock adapter constructors."""
        with (
            patch("nibe_stats.entrypoints.daemon.NibeUplinkAdapter") as mock_nibe,
            patch("nibe_stats.entrypoints.daemon.SqliteAdapter") as mock_sqlite,
            patch("nibe_stats.entrypoints.daemon.InfluxDBAdapter") as mock_influx,
        ):
            mock_nibe.return_value = AsyncMock(spec=NibeUplinkAdapter)
            mock_sqlite.return_value = AsyncMock(spec=SqliteAdapter)
            mock_influx.return_value = AsyncMock(spec=InfluxDBAdapter)

            yield {
                "nibe": mock_nibe,
                "sqlite": mock_sqlite,
                "influx": mock_influx,
            }

    @pytest.fixture
    def mock_scheduler(self):
        with patch("nibe_stats.entrypoints.daemon.Scheduler") as mock:
            instance = MagicMock(spec=Scheduler)
            instance.run = AsyncMock(side_effect=asyncio.CancelledError())
            mock.return_value = instance
            yield mock

    @pytest.mark.asyncio
    async def test_main_production_mode_initialization(self, mock_settings_production, mock_adapters, mock_scheduler):
        await main()

        nibe_kwargs = mock_adapters["nibe"].call_args.kwargs
        assert nibe_kwargs["client_id"] == "client-id"
        assert nibe_kwargs["client_secret"] == "client-secret"
        assert nibe_kwargs["system_id"] == "58248"
        assert nibe_kwargs["token_store"].get_refresh_token() == "seed-refresh"
        assert nibe_kwargs["token_store"].get_access_token() == "seed-access"

        mock_adapters["sqlite"].assert_called_once_with(db_path="test.db", scale_factor=10.0)
        mock_adapters["influx"].assert_not_called()

        assert mock_scheduler.call_args.kwargs["interval_seconds"] == 300.0

    @pytest.mark.asyncio
    async def test_storage_connected_before_first_cycle(self, mock_settings_production, mock_adapters, mock_scheduler):
        order = []
        repository = mock_adapters["sqlite"].return_value
        repository.connect.side_effect = lambda: order.append("connect")
        mock_scheduler.return_value.run.side_effect = lambda: order.append("run")

        await main()

        assert order == ["connect", "run"]

    @pytest.mark.asyncio
    async def test_influxdb_backend(self, mock_settings_production, mock_adapters, mock_scheduler):
        mock_settings_production.STORAGE_BACKEND = "influxdb"

        await main()

        mock_adapters["influx"].assert_called_once_with(
            url="http://influxdb:8086",
            token="test_token",
            org="home",
            bucket="nibe_raw",
            scale_factor=10.0,
        )
        mock_adapters["sqlite"].assert_not_called()

    @pytest.mark.asyncio
    async def test_storage_connection_failure_exits(self, mock_settings_production, mock_adapters, mock_scheduler):
        mock_adapters["sqlite"].return_value.connect.side_effect = Exception("unable to open database file")

        with pytest.raises(SystemExit) as exc_info:
            await main()

        assert exc_info.value.code == 1
        mock_scheduler.return_value.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_clients_closed_on_shutdown(self, mock_settings_production, mock_adapters, mock_scheduler):
        await main()

        mock_adapters["nibe"].return_value.close.assert_awaited_once()
        mock_adapters["sqlite"].return_value.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_main_mock_mode_initialization(self, mock_settings_production, mock_adapters, mock_scheduler):
        mock_settings_production.COLLECTOR_MODE = "mock"

        with (
            patch("nibe_stats.adapters.mocks.MockNibeAdapter") as mock_api,
            patch("nibe_stats.adapters.mocks.MockMeasurementRepository") as mock_repository,
        ):
            mock_api.return_value = AsyncMock()
            mock_repository.return_value = AsyncMock()

            await main()

        mock_api.assert_called_once()
        mock_repository.assert_called_once()
        mock_adapters["nibe"].assert_not_called()
        mock_adapters["sqlite"].assert_not_called()

    @pytest.mark.asyncio
    async def test_main_simulation_mode_uses_real_storage(self, mock_settings_production, mock_adapters, mock_scheduler):
        mock_settings_production.COLLECTOR_MODE = "simulation"

        with patch("nibe_stats.adapters.mocks.MockNibeAdapter") as mock_api:
            mock_api.return_value = AsyncMock()

            await main()

        mock_api.assert_called_once()
        mock_adapters["nibe"].assert_not_called()
        mock_adapters["sqlite"].assert_called_once()

    @pytest.mark.asyncio
    async def test_unknown_storage_backend_exits(self, mock_settings_production, mock_adapters, mock_scheduler):
        mock_settings_production.STORAGE_BACKEND = "postgres"

        with pytest.raises(SystemExit) as exc_info:
            await main()

        assert exc_info.value.code == 1
        mock_adapters["sqlite"].assert_not_called()
        mock_adapters["influx"].assert_not_called()
        mock_adapters["nibe"].return_value.close.assert_awaited_once()
        mock_scheduler.return_value.run.assert_not_called()
