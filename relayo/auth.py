import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import AUTH_JWT_AUDIENCE, AUTH_JWT_SECRET
from .database import get_db
from .models import Membership, User, Workspace

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"


@dataclass(frozen=True)
class VerifiedIdentity:
    subject: str
    email: Optional[str] = None
    name: Optional[str] = None


class TokenVerifier:
    """Verifies HS256 bearer tokens issued by the identity provider"""

    def __init__(self, secret: str = AUTH_JWT_SECRET, audience: Optional[str] = AUTH_JWT_AUDIENCE):
        self.secret = secret
        self.audience = audience

    def verify(self, token: str) -> VerifiedIdentity:
        if not token or len(token.split(".")) != 3:
            logger.warning("⚠️ Malformed bearer token received")
            raise HTTPException(
                status_code=401, detail="Invalid token format. Expected a valid JWT token."
            )

        try:
            claims = jose_jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except ExpiredSignatureError as e:
            raise HTTPException(
                status_code=401,
                detail="Token has expired. Please refresh your session.",
                headers={"X-Token-Expired": "true"},
            ) from e
        except JWTError as e:
            logger.warning(f"❌ Token verification failed: {e}")
            raise HTTPException(status_code=401, detail="Token verification failed") from e

        subject = claims.get("sub") or claims.get("uid") or claims.get("user_id")
        if not subject:
            logger.error(f"❌ Token missing subject claim. Available claims: {list(claims.keys())}")
            raise HTTPException(status_code=401, detail="Invalid token claims")

        return VerifiedIdentity(subject=str(subject), email=claims.get("email"), name=claims.get("name"))


def get_token_verifier() -> TokenVerifier:
    return TokenVerifier()


def get_or_create_user(db: Session, identity: VerifiedIdentity) -> User:
    """
    Resolve a verified identity to its user, provisioning a workspace on first sight.

    Workspace, user and owner membership are written in one transaction. When a
    concurrent first request for the same identity wins the race, the unique
    constraints reject ours and we re-read the winner's rows.
    """
    user = db.query(User).filter(User.external_id == identity.subject).first()
    if user and user.memberships:
        return user

    try:
        if not user:
            logger.info(f"🆕 Creating new user: {identity.email or identity.subject}")
            user = User(external_id=identity.subject, email=identity.email, name=identity.name)
            db.add(user)

        workspace = Workspace(name=f"{identity.email or identity.subject}'s Workspace")
        db.add(workspace)
        db.flush()
        db.add(Membership(user=user, workspace=workspace, role="owner"))
        db.commit()
        db.refresh(user)
        logger.info(f"✅ Provisioned workspace {workspace.id} for user {user.id}")
        return user
    except IntegrityError:
        db.rollback()
        logger.info(f"🔄 Concurrent provisioning for {identity.subject}, using existing records")
        user = db.query(User).filter(User.external_id == identity.subject).first()
        if not user or not user.memberships:
            raise HTTPException(status_code=500, detail="Failed to provision workspace")
        return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    verifier: TokenVerifier = Depends(get_token_verifier),
    db: Session = Depends(get_db),
) -> User:
    """Get current user (and its workspace) from the bearer token"""
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    identity = verifier.verify(credentials.credentials)
    user = get_or_create_user(db, identity)
    logger.debug(f"✅ User authenticated: {user.id} (workspace {user.workspace_id})")
    return user


def create_access_token(subject: str, email: Optional[str] = None, name: Optional[str] = None, **claims) -> str:
    """Mint a token the verifier accepts; used by local tooling and tests"""
    payload = {"sub": subject, **claims}
    if email:
        payload["email"] = email
    if name:
        payload["name"] = name
    if AUTH_JWT_AUDIENCE and "aud" not in payload:
        payload["aud"] = AUTH_JWT_AUDIENCE
    return jose_jwt.encode(payload, AUTH_JWT_SECRET, algorithm=ALGORITHM)
