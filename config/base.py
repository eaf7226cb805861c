import os
import urllib.parse


def database_uri() -> str:
    """Build the SQLAlchemy URI from DATABASE_URL or the DB_* variables."""
    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit

    user = os.getenv("DB_USER", "root")
    password = urllib.parse.quote_plus(os.getenv("DB_PASSWORD", ""))
    host = os.getenv("DB_HOST", "localhost")
    port = int(os.getenv("DB_PORT", "3306"))
    name = os.getenv("DB_NAME", "school_management")
    return f"mysql+mysqlconnector://{user}:{password}@{host}:{port}/{name}"


BACKUP_DIR = os.getenv("BACKUP_DIR", os.path.join(os.getcwd(), "backups"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
