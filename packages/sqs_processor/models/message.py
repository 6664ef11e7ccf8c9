"""Message and poll result models."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional


def _freeze(values: Dict[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class Message:
    """A single SQS delivery.

    Attributes:
        message_id: Queue-assigned message id.
        receipt_handle: Delivery-specific token used to delete this message.
        body: Raw message body.
        attributes: System attributes (SenderId, SentTimestamp, ...).
        message_attributes: User-defined message attributes, flattened to their
            string values.

    Messages hash on (message_id, receipt_handle), one delivery of one
    message; equality still compares every field.
    """
    message_id: str
    receipt_handle: str
    body: str
    attributes: Mapping[str, str] = field(default_factory=dict)
    message_attributes: Mapping[str, str] = field(default_factory=dict)

    def __hash__(self) -> int:
        return hash((self.message_id, self.receipt_handle))

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form, safe to pass to `json.dumps`."""
        return {
            "message_id": self.message_id,
            "receipt_handle": self.receipt_handle,
            "body": self.body,
            "attributes": dict(self.attributes),
            "message_attributes": dict(self.message_attributes),
        }

    @classmethod
    def from_sqs(cls, entry: Mapping[str, Any]) -> "Message":
        """Translate one entry of a boto3 `receive_message` response.

        Missing fields become empty strings or empty mappings.
        """
        attributes = {str(k): "" if v is None else str(v) for k, v in (entry.get("Attributes") or {}).items()}

        message_attributes: Dict[str, str] = {}
        for name, value in (entry.get("MessageAttributes") or {}).items():
            # Binary-only attributes have no string form
            if isinstance(value, Mapping) and value.get("StringValue") is not None:
                message_attributes[str(name)] = str(value["StringValue"])

        return cls(
            message_id=entry.get("MessageId") or "",
            receipt_handle=entry.get("ReceiptHandle") or "",
            body=entry.get("Body") or "",
            attributes=_freeze(attributes),
            message_attributes=_freeze(message_attributes),
        )


@dataclass
class PollOutcome:
    """Result of a single poll cycle.

    Either `messages` (possibly empty) or `error` is meaningful; when the poll
    failed `messages` is empty and `error` holds the cause.
    """
    messages: List[Message] = field(default_factory=list)
    error: Optional[BaseException] = None
    handler_failures: int = 0
    delete_failures: int = 0

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def empty(self) -> bool:
        return not self.failed and not self.messages

    @classmethod
    def failure(cls, error: BaseException) -> "PollOutcome":
        return cls(error=error)
