from genecars.config.loader import AppConfig, LoggingConfig, RunConfig, load_config

__all__ = ["AppConfig", "LoggingConfig", "RunConfig", "load_config"]
