"""Editing session that keeps the document buffer and the structured view in sync."""
import logging
from dataclasses import fields, replace
from typing import List, Optional

from editor.events import generate_events_html, parse_events
from editor.models import NEW_EVENT_TITLE, NEW_SCHEDULE_TITLE, EventItem, ScheduleItem
from editor.schedule import generate_schedule_html, parse_schedule

logger = logging.getLogger(__name__)

CODE_MODE = 'code'
VISUAL_MODE = 'visual'


class EditorSession:
    """
    One open file in the editor.

    The document text is the single source of truth. In visual mode the
    event and schedule lists are a derived view: every list operation
    regenerates the whole buffer from the current buffer and the full list.
    """

    def __init__(self, content: str = '', file_path: Optional[str] = None):
        """
        Initialize a session with freshly loaded file content.

        Args:
            content: Document text as read from the server
            file_path: Path of the file relative to the project root
        """
        self.file_path = file_path
        self.load(content)

    def load(self, content: str) -> None:
        """Replace the buffer with newly loaded text and return to code mode."""
        self.content = content
        self.initial_content = content
        self.mode = CODE_MODE
        self.events: List[EventItem] = []
        self.schedule: List[ScheduleItem] = []

    @property
    def has_changes(self) -> bool:
        return self.content != self.initial_content

    def set_content(self, content: str) -> None:
        """Apply a raw code edit."""
        self.content = content

    def mark_saved(self) -> None:
        self.initial_content = self.content

    def switch_to_visual(self) -> None:
        """Seed both record lists from the current buffer."""
        self.events = parse_events(self.content)
        self.schedule = parse_schedule(self.content)
        self.mode = VISUAL_MODE
        logger.info(
            f"Switched to visual mode with {len(self.events)} events and "
            f"{len(self.schedule)} schedule items",
            extra={'file_path': self.file_path}
        )

    def switch_to_code(self) -> None:
        self.mode = CODE_MODE

    # Events

    def add_event(self) -> EventItem:
        self._require_visual()
        event = EventItem(title=NEW_EVENT_TITLE)
        self.set_events(self.events + [event])
        return event

    def update_event(self, index: int, **changes) -> EventItem:
        """
        Change fields of one event and regenerate the buffer.

        Args:
            index: Position of the event in the list
            **changes: Field names and new values

        Returns:
            The updated EventItem

        Raises:
            IndexError: If index is out of range
            ValueError: If a field name is unknown
        """
        self._require_visual()
        events = list(self.events)
        events[index] = _apply_changes(events[index], changes)
        self.set_events(events)
        return events[index]

    def remove_event(self, index: int) -> EventItem:
        self._require_visual()
        events = list(self.events)
        removed = events.pop(index)
        self.set_events(events)
        return removed

    def move_event(self, index: int, new_index: int) -> None:
        self._require_visual()
        self.set_events(_moved(self.events, index, new_index))

    # Schedule

    def add_schedule_item(self) -> ScheduleItem:
        self._require_visual()
        item = ScheduleItem(title=NEW_SCHEDULE_TITLE)
        self.set_schedule(self.schedule + [item])
        return item

    def update_schedule_item(self, index: int, **changes) -> ScheduleItem:
        self._require_visual()
        items = list(self.schedule)
        items[index] = _apply_changes(items[index], changes)
        self.set_schedule(items)
        return items[index]

    def remove_schedule_item(self, index: int) -> ScheduleItem:
        self._require_visual()
        items = list(self.schedule)
        removed = items.pop(index)
        self.set_schedule(items)
        return removed

    def move_schedule_item(self, index: int, new_index: int) -> None:
        self._require_visual()
        self.set_schedule(_moved(self.schedule, index, new_index))

    def set_events(self, events: List[EventItem]) -> None:
        """Replace the whole event list and regenerate the event region."""
        self._require_visual()
        self.events = list(events)
        self.content = generate_events_html(self.content, events)

    def set_schedule(self, items: List[ScheduleItem]) -> None:
        self._require_visual()
        self.schedule = list(items)
        self.content = generate_schedule_html(self.content, items)

    def _require_visual(self) -> None:
        if self.mode != VISUAL_MODE:
            raise RuntimeError('Structured edits require visual mode')


def _apply_changes(record, changes: dict):
    allowed = {f.name for f in fields(record)} - {'id'}
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Unknown field(s): {', '.join(sorted(unknown))}")
    return replace(record, **changes)


def _moved(items: list, index: int, new_index: int) -> list:
    if not -len(items) <= new_index < len(items):
        raise IndexError('Target position out of range')
    items = list(items)
    item = items.pop(index)
    items.insert(new_index, item)
    return items
