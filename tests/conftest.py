"""Pytest configuration shared by the ledger tests."""

import os
import tempfile


def _set_default_env() -> None:
    os.environ.setdefault("LEDGER_DATABASE_URL", "sqlite://")
    os.environ.setdefault(
        "LEDGER_DATA_DIR", os.path.join(tempfile.gettempdir(), "ledger-tests")
    )
    os.environ.setdefault("LEDGER_LOG_LEVEL", "WARNING")


# Runs before any test module imports the engine.
_set_default_env()
