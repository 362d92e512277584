import os

# Settings are cached on first import, so the test environment must be in place first.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-for-attendance-ledger"
os.environ["ATTENDANCE_TIMEZONE"] = "UTC"
os.environ["SCHEMA_GUARD_ENABLED"] = "false"
