# /repfees/core/config.py
import structlog
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ledger endpoint. ETH_RPC_URL wins; otherwise the Infura URL is built
    # from DEFAULT_WEB3_PROVIDER + INFURA_PROJECT_ID.
    ETH_RPC_URL: SecretStr | None = None
    INFURA_PROJECT_ID: SecretStr | None = None
    DEFAULT_WEB3_PROVIDER: str = "https://mainnet.infura.io/v3/"

    # Augur mainnet contracts
    CASH_CONTRACT_ADDRESS: str = "0xd5524179cB7AE012f5B642C1D6D700Bbaa76B96b"
    UNIVERSE_CONTRACT_ADDRESS: str = "0xE991247b78F937D7B69cFC00f1A487A293557677"

    # Price oracles
    GAS_PRICE_URL: str = "https://ethgasstation.info/json/ethgasAPI.json"
    REP_ETH_PRICE_URL: str = "https://min-api.cryptocompare.com/data/price?fsym=REP&tsyms=ETH"
    # The gas station reports prices in tenths of a gwei
    GAS_PRICE_WEI_PER_UNIT: int = 10**8

    # Calculator defaults (gas for one buy + one redeem transaction)
    DEFAULT_GAS_USED: int = 323848
    DEFAULT_REP: str = "1"

    # Block search
    AVERAGE_BLOCK_TIME_S: int = 15
    MIN_STEP_BLOCKS: int = 10

    # Network behaviour
    RETRY_ATTEMPTS: int = 5
    RETRY_BACKOFF_S: float = 1.0
    REQUEST_TIMEOUT_S: float = 10.0

    # Operational Settings
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: SecretStr | None = None
    HTTP_PORT: int = 8080

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def rpc_url(self) -> str:
        """Endpoint used for ledger reads.

        Preference order:

        1. Explicit *ETH_RPC_URL*
        2. *DEFAULT_WEB3_PROVIDER* followed by *INFURA_PROJECT_ID*
        """
        if self.ETH_RPC_URL is not None:
            return self.ETH_RPC_URL.get_secret_value()
        project_id = self.INFURA_PROJECT_ID.get_secret_value() if self.INFURA_PROJECT_ID else ""
        return self.DEFAULT_WEB3_PROVIDER + project_id


try:
    settings = Settings()
except Exception as e:
    # The logger module depends on settings, so use structlog defaults here
    log = structlog.get_logger("repfees.Config")
    log.critical("FAILED_TO_LOAD_SETTINGS", error=str(e))
    raise SystemExit(1) from e
