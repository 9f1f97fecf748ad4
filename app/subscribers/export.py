# app/subscribers/export.py
from typing import Iterable

from app.models.subscriber import SubscriberRecord

def to_csv(records: Iterable[SubscriberRecord], include_ip: bool = True) -> str:
    """Render subscribers as CSV in the order given.

    Fields are not quoted; the email grammar rules out commas.
    """
    if include_ip:
        lines = ["email,created_at,ip"]
        lines.extend(
            f"{r.email},{r.created_at.isoformat()},{r.ip or ''}" for r in records
        )
    else:
        lines = ["email,created_at"]
        lines.extend(f"{r.email},{r.created_at.isoformat()}" for r in records)

    return "\n".join(lines)
