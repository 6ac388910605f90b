"""Event list pipeline: parse event blocks out of a page and regenerate them."""
import logging
import re
from typing import Iterable, List, Optional

from editor.markers import EVENT_MARKERS, MARKER_INDENT, splice_between_markers, split_lines
from editor.models import EventItem

logger = logging.getLogger(__name__)

# Block layout, version 1:
#
#   <div class="event-in">
#       <h3>title<br>title</h3>
#       <div class="event-in-flex">
#           <div> <p>…</p> x4 </div>
#           <div class="event_btns"> two <div class="btn"><a href>…</a></div> </div>
#       </div>
#   </div>
#
# Separators between tags accept any whitespace. Title and info may not
# contain a <div>, and the buttons may not run into another event block, so a
# block with a different inner structure never swallows its neighbour.
EVENT_BLOCK_PATTERN = re.compile(
    r'''
    <div\s+class="event-in">\s*
    <h3>(?P<title>(?:(?!</h3>|<div\b).)*?)</h3>\s*
    <div\s+class="event-in-flex">\s*
    <div>\s*(?P<info>(?:(?!</?div\b).)*?)\s*</div>\s*
    <div\s+class="event_btns">\s*(?P<buttons>(?:(?!<div\s+class="event-in").)*?)\s*</div>\s*
    </div>\s*
    </div>
    ''',
    re.DOTALL | re.VERBOSE
)

PARAGRAPH_PATTERN = re.compile(r'<p(?:\s[^>]*)?>(?P<text>.*?)</p>', re.DOTALL)

DATE_LABEL = '日時：'
WEB_SALE_LABEL = 'ＷＥＢ販売：'
COUNTER_SALE_LABEL = '窓口発売日：'

DATE_LINE = re.compile(r'^日時[：:]\s*')
WEB_SALE_LINE = re.compile(r'^ＷＥＢ販売[：:]\s*')
COUNTER_SALE_LINE = re.compile(r'^窓口発売日[：:]\s*')
TIME_HINT = re.compile(r'開演|開場')

TICKET_TEXT = 'チケットを買う'
DETAIL_TEXT = '詳しく見る'

TICKET_LINK = re.compile(
    r'<a\s[^>]*?href="(?P<href>[^"]*)"[^>]*>\s*' + TICKET_TEXT, re.DOTALL
)
DETAIL_LINK = re.compile(
    r'<a\s[^>]*?href="(?P<href>[^"]*)"[^>]*>\s*' + DETAIL_TEXT, re.DOTALL
)

EVENT_TEMPLATE = '''
                    <div class="event-in">
                        <h3>{title}</h3>
                        <div class="event-in-flex">
                            <div>
                                <p>{date_label}{date}</p>
                                <p>{time}</p>
                                <p>{web_sale_label}{web_sale_date}</p>
                                <p>{counter_sale_label}{counter_sale_date}</p>
                            </div>
                            <div class="event_btns">
                                <div class="btn btn_bottom">
                                    <a href="{ticket_link}">{ticket_text}<span></span></a>
                                </div>
                                <div class="btn" style="margin-bottom: 25px;">
                                    <a href="{detail_link}">{detail_text}<span></span></a>
                                </div>
                            </div>
                        </div>
                    </div>'''


def parse_events(document: str) -> List[EventItem]:
    """
    Extract every well-formed event block from a page.

    Lines missing from a block parse to empty strings. A page without any
    matching block yields an empty list.

    Args:
        document: Full page text

    Returns:
        EventItem objects in document order, each with a fresh id
    """
    events = []

    for match in EVENT_BLOCK_PATTERN.finditer(document):
        info = _parse_info(match.group('info'))
        buttons = match.group('buttons')

        events.append(EventItem(
            title='\n'.join(split_lines(match.group('title'))).strip(),
            date=info['date'],
            time=info['time'],
            web_sale_date=info['web_sale_date'],
            counter_sale_date=info['counter_sale_date'],
            ticket_link=_find_href(TICKET_LINK, buttons),
            detail_link=_find_href(DETAIL_LINK, buttons)
        ))

    logger.debug(f"Parsed {len(events)} event blocks")
    return events


def generate_events_html(document: str, events: Iterable[EventItem]) -> str:
    """
    Re-render the event region of a page from a list of events.

    Everything outside the event markers, the markers included, is kept
    verbatim. Without both markers the document is returned unchanged.

    Args:
        document: Full page text the region is spliced into
        events: Events in the order they should appear

    Returns:
        New page text
    """
    blocks = [render_event(event) for event in events]
    content = '\n\n' + '\n'.join(blocks) + '\n\n' + MARKER_INDENT
    return splice_between_markers(document, EVENT_MARKERS, content)


def render_event(event: EventItem) -> str:
    """Render one event with the canonical indentation."""
    return EVENT_TEMPLATE.format(
        title=event.title.replace('\n', '<br>'),
        date_label=DATE_LABEL,
        date=event.date,
        time=event.time,
        web_sale_label=WEB_SALE_LABEL,
        web_sale_date=event.web_sale_date,
        counter_sale_label=COUNTER_SALE_LABEL,
        counter_sale_date=event.counter_sale_date,
        ticket_link=event.ticket_link,
        ticket_text=TICKET_TEXT,
        detail_link=event.detail_link,
        detail_text=DETAIL_TEXT
    )


def _parse_info(info_html: str) -> dict:
    """
    Classify the paragraphs of an info segment by their label.

    The time line carries no label. It is the first unlabeled paragraph that
    mentions the opening or curtain time, or failing that the first unlabeled
    paragraph at all.
    """
    fields = {
        'date': '',
        'time': '',
        'web_sale_date': '',
        'counter_sale_date': ''
    }
    unlabeled = []

    for paragraph in PARAGRAPH_PATTERN.finditer(info_html):
        text = paragraph.group('text').strip()

        labelled = False
        for key, label in (
            ('date', DATE_LINE),
            ('web_sale_date', WEB_SALE_LINE),
            ('counter_sale_date', COUNTER_SALE_LINE)
        ):
            label_match = label.match(text)
            if label_match:
                if not fields[key]:
                    fields[key] = text[label_match.end():].strip()
                labelled = True
                break

        if not labelled:
            unlabeled.append(text)

    fields['time'] = _pick_time_line(unlabeled)
    return fields


def _pick_time_line(candidates: List[str]) -> str:
    for text in candidates:
        if TIME_HINT.search(text):
            return text
    return candidates[0] if candidates else ''


def _find_href(pattern: re.Pattern, buttons_html: str) -> str:
    match: Optional[re.Match] = pattern.search(buttons_html)
    return match.group('href').strip() if match else ''
