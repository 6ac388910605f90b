"""Configuration read from environment variables."""
import os
from dataclasses import dataclass


@dataclass
class Settings:
    projects_table: str
    profiles_table: str
    assignments_table: str
    user_pool_id: str
    log_level: str
    ftp_timeout_seconds: int
    ftp_verbose: bool


def load_settings() -> Settings:
    """Read settings from the environment, falling back to defaults."""
    return Settings(
        projects_table=os.environ.get('PROJECTS_TABLE', 'site-editor-projects'),
        profiles_table=os.environ.get('PROFILES_TABLE', 'site-editor-profiles'),
        assignments_table=os.environ.get('ASSIGNMENTS_TABLE', 'site-editor-user-projects'),
        user_pool_id=os.environ.get('USER_POOL_ID', ''),
        log_level=os.environ.get('LOG_LEVEL', 'INFO'),
        ftp_timeout_seconds=int(os.environ.get('FTP_TIMEOUT_SECONDS', '30')),
        ftp_verbose=os.environ.get('FTP_VERBOSE', '').lower() in ('1', 'true', 'yes')
    )
