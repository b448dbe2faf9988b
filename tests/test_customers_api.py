from datetime import timedelta

from relayo.auth import VerifiedIdentity, get_or_create_user
from relayo.models import Customer, Message, Reservation


def add_customer(db, workspace_id, **fields):
    customer = Customer(workspace_id=workspace_id, **fields)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def test_requires_bearer_token(client):
    response = client.get("/customers")

    assert response.status_code == 401


def test_rejects_invalid_token(client):
    response = client.get("/customers", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_create_customer(client, auth_headers, db, user):
    response = client.post(
        "/customers",
        json={"name": "Jane Doe", "phone": "+1 (555) 010-1000", "email": "Jane@Example.com"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Jane Doe"
    assert body["phone"] == "+15550101000"
    assert body["email"] == "jane@example.com"
    assert body["reservations"] == []
    assert db.query(Customer).filter_by(workspace_id=user.workspace_id).count() == 1


def test_duplicate_phone_is_rejected(client, auth_headers, db, user):
    add_customer(db, user.workspace_id, name="Existing", phone="+15550101")

    response = client.post("/customers", json={"name": "Someone", "phone": "+15550101"}, headers=auth_headers)

    assert response.status_code == 409
    assert db.query(Customer).count() == 1


def test_duplicate_email_is_rejected(client, auth_headers, db, user):
    add_customer(db, user.workspace_id, name="Existing", email="jane@example.com")

    response = client.post(
        "/customers", json={"phone": "+15550199", "email": "jane@example.com"}, headers=auth_headers
    )

    assert response.status_code == 409


def test_missing_email_does_not_match_customers_without_email(client, auth_headers, db, user):
    add_customer(db, user.workspace_id, name="Phone only", phone="+15550111")

    response = client.post("/customers", json={"phone": "+15550222"}, headers=auth_headers)

    assert response.status_code == 201


def test_same_phone_in_another_workspace_is_allowed(client, auth_headers, db):
    other = get_or_create_user(db, VerifiedIdentity(subject="user-2"))
    add_customer(db, other.workspace_id, phone="+15550101")

    response = client.post("/customers", json={"phone": "+15550101"}, headers=auth_headers)

    assert response.status_code == 201


def test_create_requires_phone_or_email(client, auth_headers):
    response = client.post("/customers", json={"name": "No contact"}, headers=auth_headers)

    assert response.status_code == 422


def test_create_rejects_unknown_fields(client, auth_headers):
    response = client.post("/customers", json={"phone": "+15550101", "vip": True}, headers=auth_headers)

    assert response.status_code == 422


def test_list_customers_with_search(client, auth_headers, db, user):
    add_customer(db, user.workspace_id, name="Jane Doe", phone="+15550101")
    add_customer(db, user.workspace_id, name="Bob", email="bob@JANEMAIL.com")
    add_customer(db, user.workspace_id, name="Carl", phone="+15550999")

    all_customers = client.get("/customers", headers=auth_headers).json()
    by_name = client.get("/customers", params={"search": "jane"}, headers=auth_headers).json()
    by_phone = client.get("/customers", params={"search": "0999"}, headers=auth_headers).json()

    assert len(all_customers) == 3
    assert {c["name"] for c in by_name} == {"Jane Doe", "Bob"}
    assert [c["name"] for c in by_phone] == ["Carl"]


def test_list_includes_five_latest_reservations_and_messages(client, auth_headers, db, user, t0):
    customer = add_customer(db, user.workspace_id, name="Jane", phone="+15550101")
    for i in range(7):
        db.add(
            Reservation(
                workspace_id=user.workspace_id,
                customer_id=customer.id,
                event_id=f"ev{i}",
                title=f"Visit {i}",
                start=t0 + timedelta(days=i),
                end=t0 + timedelta(days=i, hours=1),
            )
        )
        db.add(
            Message(
                workspace_id=user.workspace_id,
                customer_id=customer.id,
                direction="inbound",
                body=f"msg {i}",
                created_at=t0 + timedelta(minutes=i),
            )
        )
    db.commit()

    [body] = client.get("/customers", headers=auth_headers).json()

    assert [r["eventId"] for r in body["reservations"]] == ["ev6", "ev5", "ev4", "ev3", "ev2"]
    assert [m["body"] for m in body["messages"]] == ["msg 6", "msg 5", "msg 4", "msg 3", "msg 2"]


def test_other_workspace_customer_is_not_found(client, auth_headers, db):
    other = get_or_create_user(db, VerifiedIdentity(subject="user-2"))
    customer = add_customer(db, other.workspace_id, phone="+15550101")

    assert client.get(f"/customers/{customer.id}", headers=auth_headers).status_code == 404
    assert client.patch(f"/customers/{customer.id}", json={"name": "x"}, headers=auth_headers).status_code == 404
    assert client.get(f"/customers/{customer.id}/messages", headers=auth_headers).status_code == 404


def test_update_customer(client, auth_headers, db, user):
    customer = add_customer(db, user.workspace_id, name="Jane", phone="+15550101")

    response = client.patch(
        f"/customers/{customer.id}", json={"name": "Jane Doe", "notes": "Prefers mornings"}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Jane Doe"
    assert response.json()["notes"] == "Prefers mornings"
    assert response.json()["phone"] == "+15550101"


def test_update_to_existing_phone_conflicts(client, auth_headers, db, user):
    add_customer(db, user.workspace_id, name="Jane", phone="+15550101")
    bob = add_customer(db, user.workspace_id, name="Bob", phone="+15550202")

    response = client.patch(f"/customers/{bob.id}", json={"phone": "+15550101"}, headers=auth_headers)

    assert response.status_code == 409


def test_customer_messages_oldest_first(client, auth_headers, db, user, t0):
    customer = add_customer(db, user.workspace_id, name="Jane", phone="+15550101")
    db.add_all(
        [
            Message(workspace_id=user.workspace_id, customer_id=customer.id, direction="outbound",
                    body="second", created_at=t0 + timedelta(minutes=5)),
            Message(workspace_id=user.workspace_id, customer_id=customer.id, direction="inbound",
                    body="first", created_at=t0),
        ]
    )
    db.commit()

    response = client.get(f"/customers/{customer.id}/messages", headers=auth_headers)

    assert response.status_code == 200
    assert [m["body"] for m in response.json()] == ["first", "second"]
    assert response.json()[0]["createdAt"] == "2026-03-10T15:00:00Z"
