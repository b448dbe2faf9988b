"""
Credential encryption and OAuth state signing
"""

import base64
import hashlib
import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .config import SECRET_KEY

logger = logging.getLogger(__name__)

OAUTH_STATE_SALT = "google-oauth-state"
OAUTH_STATE_MAX_AGE = 15 * 60


def _fernet_key(secret: str) -> bytes:
    # Fernet needs 32 url-safe base64 bytes; derive them from the app secret
    return base64.urlsafe_b64encode(hashlib.sha256(secret.encode()).digest())


cipher_suite = Fernet(_fernet_key(SECRET_KEY))
state_serializer = URLSafeTimedSerializer(SECRET_KEY, salt=OAUTH_STATE_SALT)


def encrypt_credential(credential: Optional[str]) -> Optional[str]:
    """Encrypt a credential for storage"""
    if credential is None:
        return None
    return cipher_suite.encrypt(credential.encode()).decode()


def decrypt_credential(encrypted_credential: Optional[str]) -> Optional[str]:
    """Decrypt a stored credential"""
    if encrypted_credential is None:
        return None
    try:
        return cipher_suite.decrypt(encrypted_credential.encode()).decode()
    except InvalidToken:
        logger.error("❌ Failed to decrypt stored credential (SECRET_KEY changed?)")
        raise


def sign_oauth_state(workspace_id: int) -> str:
    return state_serializer.dumps({"workspaceId": workspace_id})


def load_oauth_state(state: str, max_age: int = OAUTH_STATE_MAX_AGE) -> Optional[int]:
    """Return the workspace id carried by a signed state, or None if it is invalid/expired"""
    try:
        payload = state_serializer.loads(state, max_age=max_age)
    except SignatureExpired:
        logger.warning("⚠️ OAuth state expired")
        return None
    except BadSignature:
        logger.warning("🚫 OAuth state signature mismatch")
        return None
    workspace_id = payload.get("workspaceId") if isinstance(payload, dict) else None
    return int(workspace_id) if workspace_id is not None else None
