"""
Pytest configuration and fixtures for wspace tests.
"""
import pytest

# "Hello!" written directly in Whitespace: push/wchar pairs, one Dup for the
# double l, then End.
HELLO = (
    b"   \t  \t   \n\t\n     \t\t  \t \t\n\t\n     \t\t \t\t  \n \n"
    b" \t\n  \t\n     \t\t \t\t\t\t\n\t\n     \t    \t\n\t\n  \n\n\n"
)


@pytest.fixture
def hello_source() -> bytes:
    return HELLO
