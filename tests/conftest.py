"""Shared test setup.

SEED_JOKES must be set before any ``app`` import so every app built by the
tests starts with empty stores.
"""

import os

os.environ["SEED_JOKES"] = "false"
