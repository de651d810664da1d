import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "student_portal"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Days a "remember me" session survives.
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))

# Lets the register page create admin accounts. Keep off outside local setups.
ALLOW_ADMIN_REGISTRATION = bool(int(os.getenv("ALLOW_ADMIN_REGISTRATION", "1")))

# "pooled" (sum present / sum total) or "mean" (mean of subject percentages)
ATTENDANCE_AGGREGATION = os.getenv("ATTENDANCE_AGGREGATION", "pooled")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
