"""
Web API configuration.
"""
from reporting.config import config, VERSION

# Web server settings
WEB_HOST = config.web.host
WEB_PORT = config.web.port

# Rate limits (per client IP)
REPORT_RATE_LIMIT = f"{config.web.rate_limit_per_minute}/minute"
HEALTH_RATE_LIMIT = "60/minute"

# Seconds a client should wait before retrying after a record source failure
RETRY_AFTER_SECONDS = 30

__all__ = ["WEB_HOST", "WEB_PORT", "REPORT_RATE_LIMIT", "HEALTH_RATE_LIMIT", "RETRY_AFTER_SECONDS", "VERSION"]
