# reseller_monitor/utils/security.py
import logging
import os

from cryptography.fernet import Fernet, InvalidToken

from ..core.config import APP_ENV

logger = logging.getLogger(__name__)

# Clave con la que el panel de administración cifra las contraseñas de los routers
ENCRYPTION_KEY = os.getenv("ENCRYPTION_KEY")

if not ENCRYPTION_KEY:
    if APP_ENV == "production":
        raise RuntimeError(
            "FATAL: ENCRYPTION_KEY no está configurada. "
            "Es obligatoria en producción para descifrar credenciales de routers."
        )
    logger.warning("ENCRYPTION_KEY is not set; router passwords are read as plain text.")
    cipher_suite = None
else:
    try:
        cipher_suite = Fernet(ENCRYPTION_KEY.encode())
    except ValueError as e:
        if APP_ENV == "production":
            raise RuntimeError(f"FATAL: ENCRYPTION_KEY inválida: {e}")
        logger.error(f"Invalid ENCRYPTION_KEY, router passwords are read as plain text: {e}")
        cipher_suite = None


def decrypt_data(token: str) -> str:
    """Descifra un token (string)."""
    if not cipher_suite or not token:
        return token
    try:
        return cipher_suite.decrypt(token.encode()).decode()
    except InvalidToken:
        # Contraseña antigua guardada en texto plano
        logger.warning("Could not decrypt a stored credential, assuming legacy plain text.")
        return token
