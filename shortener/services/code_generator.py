"""
Short Code Generation

Codes are drawn uniformly at random with nanoid (backed by the OS CSPRNG),
so they are not guessable from one another. Uniqueness is not checked here:
the store rejects a colliding code and the allocator retries.
"""

from typing import Callable

from nanoid import generate

from shortener.core.setting import BASE62_ALPHABET

DEFAULT_CODE_LENGTH = 6

CodeGenerator = Callable[[], str]


def generate_code(length: int = DEFAULT_CODE_LENGTH, alphabet: str = BASE62_ALPHABET) -> str:
    """
    Generate a random short code.

    Args:
        length: Number of characters (default: 6)
        alphabet: Characters to draw from (default: base62)

    Returns:
        Random code, e.g. "Ab3dE9"
    """
    return generate(alphabet, length)


def code_generator(length: int = DEFAULT_CODE_LENGTH, alphabet: str = BASE62_ALPHABET) -> CodeGenerator:
    """Bind length and alphabet into a zero-argument generator."""
    def _generate() -> str:
        return generate_code(length, alphabet)
    return _generate
