"""Default configuration parameters for the analysis client."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ApiParams:
    """Remote statistics service parameters."""
    base_url: str = ""                      # Empty means same origin as the page URL
    timeout_seconds: float = 30.0
    user_agent: str = "surprise-app/0.1"


@dataclass(frozen=True)
class LoadingParams:
    """Loading escalation parameters."""
    escalation_delay_seconds: float = 15.0  # Loading time before the long-wait message


@dataclass(frozen=True)
class ExportParams:
    """Tabular export parameters."""
    download_dir: str = "downloads"
    delimiter: str = ","
    encoding: str = "utf-8"


@dataclass(frozen=True)
class SelectionParams:
    """Fallback parameter selection when nothing valid is seeded."""
    indicator: str = "CPI"
    market: str = "S&P 500"
    horizon: str = "Same day"


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class ClientConfig:
    """Complete client configuration."""
    api: ApiParams
    loading: LoadingParams
    export: ExportParams
    selection: SelectionParams
    logging: LoggingParams


def get_default_config() -> ClientConfig:
    """Get the default configuration instance."""
    return ClientConfig(
        api=ApiParams(),
        loading=LoadingParams(),
        export=ExportParams(),
        selection=SelectionParams(),
        logging=LoggingParams(),
    )
