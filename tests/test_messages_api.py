from datetime import timedelta

from relayo.auth import VerifiedIdentity, get_or_create_user
from relayo.models import Customer, Message


def add_customer(db, workspace_id, **fields):
    customer = Customer(workspace_id=workspace_id, **fields)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def test_conversations_endpoint(client, auth_headers, db, user, t0):
    jane = add_customer(db, user.workspace_id, name="Jane", phone="+15550101")
    bob = add_customer(db, user.workspace_id, name="Bob", phone="+15550202")
    db.add_all(
        [
            Message(workspace_id=user.workspace_id, customer_id=jane.id, direction="inbound", body="hi",
                    created_at=t0),
            Message(workspace_id=user.workspace_id, customer_id=jane.id, direction="outbound", body="hello!",
                    created_at=t0 + timedelta(minutes=1)),
            Message(workspace_id=user.workspace_id, customer_id=bob.id, direction="inbound", body="book me",
                    created_at=t0 + timedelta(minutes=5)),
            Message(workspace_id=user.workspace_id, direction="inbound", body="unlinked",
                    created_at=t0 + timedelta(minutes=9)),
        ]
    )
    db.commit()

    response = client.get("/messages", headers=auth_headers)

    assert response.status_code == 200
    conversations = response.json()["conversations"]
    assert [c["customerName"] for c in conversations] == ["Bob", "Jane"]
    assert conversations[1]["lastMessage"] == "hello!"
    assert conversations[1]["lastMessageTime"] == "2026-03-10T15:01:00Z"
    assert conversations[1]["unreadCount"] == 1
    assert conversations[1]["threadId"] == f"customer-{jane.id}"


def test_conversations_are_scoped_to_the_workspace(client, auth_headers, db, t0):
    other = get_or_create_user(db, VerifiedIdentity(subject="user-2"))
    stranger = add_customer(db, other.workspace_id, name="Stranger", phone="+15550303")
    db.add(Message(workspace_id=other.workspace_id, customer_id=stranger.id, direction="inbound", body="hey",
                   created_at=t0))
    db.commit()

    response = client.get("/messages", headers=auth_headers)

    assert response.json() == {"conversations": []}


def test_send_sms_requires_twilio(client, auth_headers, fake_twilio):
    response = client.post("/messages/sms", json={"to": "+15550101", "body": "Hi"}, headers=auth_headers)

    assert response.status_code == 400
    assert fake_twilio.sent == []


def test_send_sms_stores_outbound_message(client, auth_headers, db, user, twilio_integration, fake_twilio):
    jane = add_customer(db, user.workspace_id, name="Jane", phone="+15550101")

    response = client.post(
        "/messages/sms",
        json={"to": "+1 555-0101", "body": "See you tomorrow", "customerId": jane.id},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["direction"] == "outbound"
    assert body["toNumber"] == "+15550101"
    assert body["fromNumber"] == "+15550009999"
    assert body["customerId"] == jane.id
    assert body["providerMessageId"].startswith("SM")
    assert fake_twilio.sent == [("+15550101", "See you tomorrow")]
    assert db.query(Message).count() == 1


def test_send_sms_to_unknown_customer(client, auth_headers, twilio_integration, fake_twilio):
    response = client.post(
        "/messages/sms", json={"to": "+15550101", "body": "Hi", "customerId": 999}, headers=auth_headers
    )

    assert response.status_code == 404
    assert fake_twilio.sent == []


def test_send_sms_provider_failure(client, auth_headers, db, twilio_integration, fake_twilio):
    fake_twilio.fail = True

    response = client.post("/messages/sms", json={"to": "+15550101", "body": "Hi"}, headers=auth_headers)

    assert response.status_code == 502
    assert db.query(Message).count() == 0


def test_send_sms_validates_body(client, auth_headers, twilio_integration):
    blank = client.post("/messages/sms", json={"to": "+15550101", "body": "   "}, headers=auth_headers)
    too_long = client.post("/messages/sms", json={"to": "+15550101", "body": "x" * 1601}, headers=auth_headers)

    assert blank.status_code == 422
    assert too_long.status_code == 422
