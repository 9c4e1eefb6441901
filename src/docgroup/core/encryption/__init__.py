from docgroup.core.encryption.cipher import PasswordCipher
from docgroup.core.encryption.policy import EncryptionPolicy

__all__ = ["EncryptionPolicy", "PasswordCipher"]
