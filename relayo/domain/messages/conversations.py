"""
Conversation aggregation

Folds a workspace's flat message log into one summary per customer for the
conversation list. Pure: takes message rows (with their optional ``customer``)
and returns summaries without touching the database.
"""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel

from ...shared.schemas import CustomerBrief, UTCDateTime


class ConversationSummary(BaseModel):
    threadId: str
    customerName: str
    customerContact: Optional[str] = None
    lastMessage: str
    lastMessageTime: UTCDateTime
    unreadCount: int
    channel: str
    customer: CustomerBrief


def summarize_conversations(messages: Iterable[Any]) -> List[ConversationSummary]:
    """
    Group messages by customer.

    Expects messages newest first, but only a strictly newer timestamp replaces a
    thread's last message, so out-of-order input still yields the latest body.
    Inbound messages count as unread; messages with no customer are skipped.
    """
    threads: Dict[int, Dict[str, Any]] = {}

    for message in messages:
        customer = message.customer
        if customer is None:
            continue

        thread = threads.get(customer.id)
        if thread is None:
            contact = customer.phone or message.from_number or message.to_number
            thread = threads[customer.id] = {
                "threadId": f"customer-{customer.id}",
                "customerName": customer.name or customer.phone or "Unknown",
                "customerContact": contact,
                "lastMessage": message.body,
                "lastMessageTime": message.created_at,
                "unreadCount": 0,
                "channel": message.channel,
                "customer": CustomerBrief(
                    id=customer.id, name=customer.name, phone=contact, email=customer.email
                ),
            }
        elif message.created_at > thread["lastMessageTime"]:
            thread["lastMessage"] = message.body
            thread["lastMessageTime"] = message.created_at

        if message.direction == "inbound":
            thread["unreadCount"] += 1

    summaries = [ConversationSummary(**thread) for thread in threads.values()]
    # list.sort is stable: ties keep first-seen order
    summaries.sort(key=lambda summary: summary.lastMessageTime, reverse=True)
    return summaries
