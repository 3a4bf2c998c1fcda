from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Solana Configuration
    solana_rpc_url: str = "http://127.0.0.1:8899"
    # Deployed Lockrion program (Base58). Empty until configured per cluster.
    program_id: str = ""

    # Confirmation: processed | confirmed | finalized
    commitment: str = "confirmed"
    confirm_timeout_seconds: float = 60.0
    confirm_poll_seconds: float = 0.5

    class Config:
        env_prefix = "LOCKRION_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


settings = Settings()
