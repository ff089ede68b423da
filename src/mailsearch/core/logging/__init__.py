from .setup import CorrelationIdFilter, configure_logging, get_logger, log_files

__all__ = ["CorrelationIdFilter", "configure_logging", "get_logger", "log_files"]
