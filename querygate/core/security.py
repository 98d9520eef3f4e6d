from typing import Optional

from cryptography.fernet import Fernet, InvalidToken


class RecordCipher:
    """Encrypts persisted values, which hold connection strings with credentials."""

    def __init__(self, encryption_key: str):
        if isinstance(encryption_key, str):
            encryption_key = encryption_key.encode()
        self.cipher = Fernet(encryption_key)

    def encrypt(self, value: str) -> str:
        return self.cipher.encrypt(value.encode()).decode()

    def decrypt(self, token: str) -> str:
        return self.cipher.decrypt(token.encode()).decode()


def build_record_cipher(encryption_key: Optional[str]) -> Optional[RecordCipher]:
    if not encryption_key:
        return None
    return RecordCipher(encryption_key)


__all__ = ["RecordCipher", "build_record_cipher", "InvalidToken"]
