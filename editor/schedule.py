"""Annual schedule pipeline: parse schedule rows out of a page and regenerate them."""
import logging
import re
from typing import Iterable, List

from editor.markers import MARKER_INDENT, SCHEDULE_MARKERS, splice_between_markers, split_lines
from editor.models import ScheduleItem

logger = logging.getLogger(__name__)

CLOSED_TEXT = '終了しました'
CLOSED_LINE = f'<p class="close">{CLOSED_TEXT}</p>'

# Block layout, version 1:
#
#   <div class="year-event-text">
#       <h5>title</h5>
#       <p>date<br>
#           time
#       </p>
#       <p class="close">終了しました</p>     (optional)
#   </div>
SCHEDULE_BLOCK_PATTERN = re.compile(
    r'''
    <div\s+class="year-event-text">\s*
    <h5>(?P<title>(?:(?!</h5>|<div\b).)*?)</h5>\s*
    <p>(?P<when>(?:(?!</?p\b|<div\b).)*?)</p>
    (?P<closed>\s*<p\s+class="close">\s*''' + CLOSED_TEXT + r'''\s*</p>)?
    \s*</div>
    ''',
    re.DOTALL | re.VERBOSE
)

SCHEDULE_TEMPLATE = '''                    <div class="year-event-text">
                        <h5>{title}</h5>
                        <p>{date}<br>
                            {time}
                        </p>{closed}
                    </div>'''

CLOSED_TEMPLATE = '\n                        ' + CLOSED_LINE


def parse_schedule(document: str) -> List[ScheduleItem]:
    """
    Extract every schedule row from a page.

    Args:
        document: Full page text

    Returns:
        ScheduleItem objects in document order, each with a fresh id
    """
    items = []

    for match in SCHEDULE_BLOCK_PATTERN.finditer(document):
        parts = split_lines(match.group('when'))
        time = ' '.join(parts[1:]).strip()

        items.append(ScheduleItem(
            title=match.group('title').strip(),
            date=parts[0],
            time=time,
            is_closed=match.group('closed') is not None
        ))

    logger.debug(f"Parsed {len(items)} schedule blocks")
    return items


def generate_schedule_html(document: str, items: Iterable[ScheduleItem]) -> str:
    """
    Re-render the schedule region of a page from a list of rows.

    The closed line is written only for rows marked closed. Text outside the
    schedule markers is kept verbatim; without both markers the document is
    returned unchanged.

    Args:
        document: Full page text the region is spliced into
        items: Schedule rows in the order they should appear

    Returns:
        New page text
    """
    blocks = [render_schedule_item(item) for item in items]
    content = '\n' + '\n'.join(blocks) + '\n' + MARKER_INDENT
    return splice_between_markers(document, SCHEDULE_MARKERS, content)


def render_schedule_item(item: ScheduleItem) -> str:
    return SCHEDULE_TEMPLATE.format(
        title=item.title,
        date=item.date,
        time=item.time,
        closed=CLOSED_TEMPLATE if item.is_closed else ''
    )
