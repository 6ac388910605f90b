"""Data models for the structured fragment editor."""
import secrets
import string
from dataclasses import dataclass, field
from typing import Any, Dict

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 9

NEW_EVENT_TITLE = '新しいイベント'
NEW_SCHEDULE_TITLE = '新しい予定'


def generate_id() -> str:
    """
    Generate a short session-local identifier.

    The token only keys list operations in an editing session. It is never
    written into the document and does not survive a re-parse.

    Returns:
        Random lowercase alphanumeric token
    """
    return ''.join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


@dataclass
class EventItem:
    """One promotional event block."""
    title: str = ''
    date: str = ''
    time: str = ''
    web_sale_date: str = ''
    counter_sale_date: str = ''
    ticket_link: str = ''
    detail_link: str = ''
    id: str = field(default_factory=generate_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'date': self.date,
            'time': self.time,
            'webSaleDate': self.web_sale_date,
            'counterSaleDate': self.counter_sale_date,
            'ticketLink': self.ticket_link,
            'detailLink': self.detail_link
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EventItem':
        """
        Build an EventItem from the browser's JSON shape.

        Args:
            data: Dictionary with camelCase keys; missing keys become ''

        Returns:
            EventItem with a fresh id when none was supplied
        """
        return cls(
            title=str(data.get('title') or ''),
            date=str(data.get('date') or ''),
            time=str(data.get('time') or ''),
            web_sale_date=str(data.get('webSaleDate') or ''),
            counter_sale_date=str(data.get('counterSaleDate') or ''),
            ticket_link=str(data.get('ticketLink') or ''),
            detail_link=str(data.get('detailLink') or ''),
            id=str(data.get('id') or generate_id())
        )


@dataclass
class ScheduleItem:
    """One annual schedule row."""
    title: str = ''
    date: str = ''
    time: str = ''
    is_closed: bool = False
    id: str = field(default_factory=generate_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'date': self.date,
            'time': self.time,
            'isClosed': self.is_closed
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScheduleItem':
        """
        Build a row from its JSON record.

        Raises:
            ValueError: If isClosed is present but not a boolean
        """
        is_closed = data.get('isClosed', False)
        if not isinstance(is_closed, bool):
            raise ValueError('isClosed must be a boolean')

        return cls(
            title=str(data.get('title') or ''),
            date=str(data.get('date') or ''),
            time=str(data.get('time') or ''),
            is_closed=is_closed,
            id=str(data.get('id') or generate_id())
        )
