"""
Shared constants and factories for the AICraft SDK tests.
"""
from .client_creator import (
    create_test_api, create_test_executor, create_test_workflow,
    TEST_API_URL, TEST_TOKEN, TEST_PRIV_KEY, TEST_ADDRESS, TEST_CONTRACT,
    TEST_TX_HASH, TEST_BLOCK
)

__all__ = [
    "create_test_api",
    "create_test_executor",
    "create_test_workflow",
    "TEST_API_URL",
    "TEST_TOKEN",
    "TEST_PRIV_KEY",
    "TEST_ADDRESS",
    "TEST_CONTRACT",
    "TEST_TX_HASH",
    "TEST_BLOCK",
]
