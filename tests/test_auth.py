import time

import pytest
from fastapi import HTTPException
from jose import jwt

from relayo.auth import TokenVerifier, VerifiedIdentity, create_access_token, get_or_create_user
from relayo.models import Membership, User, Workspace

SECRET = "verifier-secret"


def token(claims, secret=SECRET):
    return jwt.encode(claims, secret, algorithm="HS256")


def test_verifier_reads_identity_claims():
    identity = TokenVerifier(SECRET).verify(token({"sub": "abc", "email": "a@example.com", "name": "Ann"}))

    assert identity == VerifiedIdentity(subject="abc", email="a@example.com", name="Ann")


def test_verifier_falls_back_to_uid_claim():
    assert TokenVerifier(SECRET).verify(token({"uid": "legacy-1"})).subject == "legacy-1"


@pytest.mark.parametrize(
    "raw",
    ["", "not-a-jwt", token({"sub": "abc"}, secret="other-secret"), token({"email": "nosub@example.com"})],
)
def test_verifier_rejects_bad_tokens(raw):
    with pytest.raises(HTTPException) as exc:
        TokenVerifier(SECRET).verify(raw)

    assert exc.value.status_code == 401


def test_expired_token_is_flagged():
    expired = token({"sub": "abc", "exp": int(time.time()) - 60})

    with pytest.raises(HTTPException) as exc:
        TokenVerifier(SECRET).verify(expired)

    assert exc.value.status_code == 401
    assert exc.value.headers == {"X-Token-Expired": "true"}


def test_audience_is_enforced_when_configured():
    verifier = TokenVerifier(SECRET, audience="relayo-api")

    assert verifier.verify(token({"sub": "abc", "aud": "relayo-api"})).subject == "abc"
    with pytest.raises(HTTPException):
        verifier.verify(token({"sub": "abc", "aud": "someone-else"}))


def test_first_sight_provisions_workspace_once(db):
    identity = VerifiedIdentity(subject="new-user", email="new@example.com")

    first = get_or_create_user(db, identity)
    second = get_or_create_user(db, identity)

    assert first.id == second.id
    assert first.workspace_id == second.workspace_id
    assert db.query(Workspace).count() == 1
    assert db.query(Workspace).one().name == "new@example.com's Workspace"
    membership = db.query(Membership).one()
    assert membership.role == "owner"


def test_repeated_requests_do_not_duplicate_workspaces(client, db):
    headers = {"Authorization": f"Bearer {create_access_token('api-user', email='api@example.com')}"}

    assert client.get("/customers", headers=headers).status_code == 200
    assert client.get("/customers", headers=headers).status_code == 200

    assert db.query(User).filter_by(external_id="api-user").count() == 1
    assert db.query(Workspace).count() == 1


def test_expired_token_over_http(client):
    expired = create_access_token("api-user", exp=int(time.time()) - 60)

    response = client.get("/customers", headers={"Authorization": f"Bearer {expired}"})

    assert response.status_code == 401
    assert response.headers["x-token-expired"] == "true"
