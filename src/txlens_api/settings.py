from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    helius_api_base_url: str = Field(default='https://api.helius.xyz/v0', alias='HELIUS_API_BASE_URL')
    helius_api_key: str | None = Field(default=None, alias='HELIUS_API_KEY')
    helius_transaction_limit: int = Field(default=10, alias='HELIUS_TRANSACTION_LIMIT')
    txlens_timeout_seconds: float | None = Field(default=None, alias='TXLENS_TIMEOUT_SECONDS')
    txlens_cache_path: str = Field(default='.cache/txlens.json', alias='TXLENS_CACHE_PATH')
    txlens_cache_max_entries: int = Field(default=1000, alias='TXLENS_CACHE_MAX_ENTRIES')
    txlens_ledger_cache_ttl_seconds: int | None = Field(
        default=None, alias='TXLENS_LEDGER_CACHE_TTL_SECONDS'
    )
    txlens_summary_cache_ttl_seconds: int | None = Field(
        default=None, alias='TXLENS_SUMMARY_CACHE_TTL_SECONDS'
    )
    aws_region: str = Field(default='us-west-2', alias='AWS_REGION')
    aws_access_key_id: str | None = Field(default=None, alias='AWS_ACCESS_KEY_ID')
    aws_secret_access_key: str | None = Field(default=None, alias='AWS_SECRET_ACCESS_KEY')
    aws_session_token: str | None = Field(default=None, alias='AWS_SESSION_TOKEN')
    bedrock_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices('BEDROCK_API_KEY', 'AWS_BEARER_TOKEN_BEDROCK'),
    )
    bedrock_model_id: str = Field(
        default='anthropic.claude-3-5-haiku-20241022-v1:0', alias='BEDROCK_MODEL_ID'
    )
    bedrock_max_tokens: int = Field(default=400, alias='BEDROCK_MAX_TOKENS')
    dd_api_key: str | None = Field(default=None, alias='DD_API_KEY')
    dd_service: str = Field(default='txlens-api', alias='DD_SERVICE')
    dd_env: str = Field(default='dev', alias='DD_ENV')
    dd_version: str = Field(default='0.1.0', alias='DD_VERSION')
    dd_site: str = Field(default='datadoghq.com', alias='DD_SITE')
    dd_send_logs: bool = Field(default=True, alias='DD_SEND_LOGS')
    dd_timeout_seconds: float = Field(default=10.0, alias='DD_TIMEOUT_SECONDS')
    dd_trace_enabled: bool = Field(default=False, alias='DD_TRACE_ENABLED')
    dd_trace_agent_url: str | None = Field(default=None, alias='DD_TRACE_AGENT_URL')


settings = Settings()
