"""
Password hashing utilities using bcrypt.
"""

import bcrypt

from userdir.kernel.errors import ValidationError
from userdir.kernel.identity.interfaces import PasswordHasher

# Number of rounds for bcrypt hashing (12 is secure default)
DEFAULT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 6


class BcryptPasswordHasher(PasswordHasher):
    """Password hashing service."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31, got {rounds}")
        self.rounds = rounds

    @staticmethod
    def _truncate_password(password: str) -> bytes:
        """
        Truncate password to 72 bytes (bcrypt limit) and encode.

        bcrypt only uses the first 72 bytes of a password and newer
        releases refuse longer input outright.
        """
        return password.encode("utf-8")[:72]

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string

        Raises:
            ValidationError: If the password is shorter than 6 characters
        """
        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(self._truncate_password(password), salt)
        return hashed.decode("utf-8")

    def compare(self, password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            password: Plain text password to verify
            hashed_password: Stored hashed password

        Returns:
            True if password matches, False otherwise (including malformed input)
        """
        if not password or not hashed_password:
            return False
        try:
            return bcrypt.checkpw(
                self._truncate_password(password),
                hashed_password.encode("utf-8"),
            )
        except (ValueError, TypeError, AttributeError):
            return False

    def needs_rehash(self, hashed_password: str) -> bool:
        """
        Check if a password hash needs to be upgraded.

        bcrypt hashes encode the cost as ``$2b$XX$...``; a hash made with a
        different cost than the configured one should be regenerated on the
        next successful login.
        """
        parts = hashed_password.split("$") if hashed_password else []
        if len(parts) < 4:
            return True
        try:
            return int(parts[2]) != self.rounds
        except ValueError:
            return True
