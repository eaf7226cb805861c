import os

SECRET_KEY = "test-secret"

SQLALCHEMY_DATABASE_URI = "sqlite://"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

BACKUP_DIR = os.getenv("BACKUP_DIR", "backups-test")

AUTO_INIT_DB = True
AUTO_SEED_DB = False
