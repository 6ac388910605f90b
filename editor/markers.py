"""Marker comments that delimit the regenerated regions of a page."""
import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Any spelling of a line break tag: <br>, <br/>, <br />, <BR>
BR_PATTERN = re.compile(r'<br\s*/?>', re.IGNORECASE)

# Whitespace run that is only source formatting, not a rendered break.
SOURCE_NEWLINE = re.compile(r'\s*\n\s*')

# Indentation the generators put in front of the end marker.
MARKER_INDENT = ' ' * 20


@dataclass(frozen=True)
class MarkerPair:
    """Literal start/end comments bounding one editable region."""
    name: str
    start: str
    end: str


EVENT_MARKERS = MarkerPair(
    name='events',
    start='<!--　イベント情報　内容　ここからdivごとに増やす　-->',
    end='<!--　イベント情報　ここまで　-->'
)

SCHEDULE_MARKERS = MarkerPair(
    name='schedule',
    start='<!--　年間イベント　内容　ここからdivごとに増やす　-->',
    end='<!--　年間イベント　内容　ここまでdivごとに増やす　-->'
)


def splice_between_markers(document: str, markers: MarkerPair, content: str) -> str:
    """
    Replace the text strictly between a start and an end marker.

    The end marker is searched after the start marker. When either cannot be
    found the document is returned untouched, so a page with an unexpected
    structure is never partially rewritten.

    Args:
        document: Full page text
        markers: Marker pair bounding the region
        content: Replacement text for the region

    Returns:
        New page text, or the original document if the markers are missing
    """
    start_index = document.find(markers.start)
    if start_index == -1:
        logger.debug(f"Start marker for {markers.name} not found, leaving document unchanged")
        return document

    region_start = start_index + len(markers.start)
    end_index = document.find(markers.end, region_start)
    if end_index == -1:
        logger.debug(f"End marker for {markers.name} not found, leaving document unchanged")
        return document

    return document[:region_start] + content + document[end_index:]


def split_lines(html: str) -> list[str]:
    """
    Split markup on line break tags and trim every piece.

    Newlines inside a piece are source formatting; each run of whitespace
    containing one collapses to a single space.

    Args:
        html: Text containing zero or more <br> tags

    Returns:
        List of trimmed pieces, always at least one element
    """
    return [SOURCE_NEWLINE.sub(' ', piece.strip()) for piece in BR_PATTERN.split(html)]
