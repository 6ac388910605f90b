"""Unit tests for the event list pipeline."""
from bs4 import BeautifulSoup

from editor.events import generate_events_html, parse_events
from editor.markers import EVENT_MARKERS
from editor.models import EventItem


def _region(document: str) -> str:
    start = document.index(EVENT_MARKERS.start) + len(EVENT_MARKERS.start)
    end = document.index(EVENT_MARKERS.end)
    return document[start:end]


def _outside(document: str) -> tuple:
    start = document.index(EVENT_MARKERS.start) + len(EVENT_MARKERS.start)
    end = document.index(EVENT_MARKERS.end)
    return document[:start], document[end:]


def _fields(event: EventItem) -> tuple:
    return (
        event.title,
        event.date,
        event.time,
        event.web_sale_date,
        event.counter_sale_date,
        event.ticket_link,
        event.detail_link
    )


class TestParseEvents:
    """Test cases for parse_events."""

    def test_parse_sample_page(self, sample_page):
        """Test that every well-formed block is parsed in document order."""
        events = parse_events(sample_page)

        assert len(events) == 2

        first = events[0]
        assert first.title == "新春にしきの亭\n落語会"
        assert first.date == "２０２６年１月１８日（日）"
        assert first.time == "開演１４：００（開場１３：３０）"
        assert first.web_sale_date == "１１月１日（土）１０：００～"
        assert first.counter_sale_date == "１１月２日（日）"
        assert first.ticket_link == "https://tickets.example.jp/nishiki"
        assert first.detail_link == "event/nishiki.html"

        second = events[1]
        assert second.title == "New Year Tea Ceremony"
        assert second.time == "開場１０：００　開演１０：３０"

    def test_missing_line_parses_to_empty_string(self, sample_page):
        """Test that a block without the counter sale line still parses."""
        event = parse_events(sample_page)[1]

        assert event.counter_sale_date == ""
        assert event.date == "２０２６年２月１日（日）"
        assert event.web_sale_date == "１２月１日（月）"
        assert event.ticket_link == "https://tickets.example.jp/tea"
        assert event.detail_link == "event/tea.html"

    def test_announcement_block_is_not_parsed(self, sample_page):
        """Test that a block with a different inner structure is skipped."""
        titles = [e.title for e in parse_events(sample_page)]

        assert "チケット郵送停止のお知らせ" not in titles

    def test_label_outside_block_is_ignored(self):
        """Test that label text outside any block never produces an event."""
        assert parse_events("<p>日時：明日</p><p>ＷＥＢ販売：今日</p>") == []

    def test_empty_input(self):
        assert parse_events("") == []

    def test_no_blocks(self):
        assert parse_events("<html><body><p>Nothing here</p></body></html>") == []

    def test_compact_markup(self):
        """Test that blocks written without any whitespace are matched."""
        html = (
            '<div class="event-in"><h3>Jazz Night</h3><div class="event-in-flex">'
            '<div><p>日時：5/1</p><p>開演19:00</p><p>ＷＥＢ販売：4/1</p><p>窓口発売日：4/2</p></div>'
            '<div class="event_btns"><div class="btn btn_bottom"><a href="/buy">チケットを買う<span></span></a></div>'
            '<div class="btn"><a href="/jazz">詳しく見る<span></span></a></div></div></div></div>'
        )

        events = parse_events(html)

        assert len(events) == 1
        assert _fields(events[0]) == (
            "Jazz Night", "5/1", "開演19:00", "4/1", "4/2", "/buy", "/jazz"
        )

    def test_time_line_without_hint_uses_first_unlabeled_paragraph(self):
        html = (
            '<div class="event-in"><h3>Talk</h3><div class="event-in-flex">'
            '<div><p>日時：6/1</p><p>14:00 start</p><p>ＷＥＢ販売：5/1</p></div>'
            '<div class="event_btns"></div></div></div>'
        )

        event = parse_events(html)[0]

        assert event.time == "14:00 start"
        assert event.counter_sale_date == ""
        assert event.ticket_link == ""
        assert event.detail_link == ""

    def test_ids_are_fresh_on_every_parse(self, sample_page):
        first = parse_events(sample_page)
        second = parse_events(sample_page)

        assert [_fields(e) for e in first] == [_fields(e) for e in second]
        assert {e.id for e in first}.isdisjoint({e.id for e in second})
        assert len({e.id for e in first}) == 2


class TestGenerateEventsHtml:
    """Test cases for generate_events_html."""

    def test_round_trip_preserves_fields(self, sample_page):
        """Test that generate then parse yields field-equivalent events."""
        events = parse_events(sample_page)

        regenerated = generate_events_html(sample_page, events)

        assert [_fields(e) for e in parse_events(regenerated)] == [_fields(e) for e in events]

    def test_round_trip_is_stable(self, sample_page):
        """Test that regenerating an already regenerated page changes nothing."""
        once = generate_events_html(sample_page, parse_events(sample_page))
        twice = generate_events_html(once, parse_events(once))

        assert once == twice

    def test_content_outside_markers_is_untouched(self, sample_page):
        events = parse_events(sample_page)

        regenerated = generate_events_html(sample_page, [events[1]])

        assert _outside(regenerated) == _outside(sample_page)
        assert "チケット郵送停止のお知らせ" in regenerated

    def test_reordering_only_changes_region(self, sample_page):
        events = parse_events(sample_page)

        regenerated = generate_events_html(sample_page, list(reversed(events)))

        assert _outside(regenerated) == _outside(sample_page)
        titles = [e.title for e in parse_events(regenerated)]
        assert titles == ["New Year Tea Ceremony", "新春にしきの亭\n落語会"]

    def test_missing_start_marker_returns_document_unchanged(self, sample_page):
        document = sample_page.replace(EVENT_MARKERS.start, "")

        assert generate_events_html(document, [EventItem(title="X")]) == document

    def test_missing_end_marker_returns_document_unchanged(self, sample_page):
        document = sample_page.replace(EVENT_MARKERS.end, "")

        assert generate_events_html(document, [EventItem(title="X")]) == document

    def test_end_marker_before_start_marker_returns_document_unchanged(self):
        document = f"a{EVENT_MARKERS.end}b{EVENT_MARKERS.start}c"

        assert generate_events_html(document, [EventItem(title="X")]) == document

    def test_empty_document(self):
        assert generate_events_html("", []) == ""

    def test_empty_event_list_clears_region(self, sample_page):
        regenerated = generate_events_html(sample_page, [])

        assert _region(regenerated).strip() == ""
        assert parse_events(regenerated) == []

    def test_empty_fields_are_still_emitted(self):
        document = f"{EVENT_MARKERS.start}{EVENT_MARKERS.end}"

        regenerated = generate_events_html(document, [EventItem(title="Only title")])

        assert "<p>日時：</p>" in regenerated
        assert "<p></p>" in regenerated
        assert "<p>ＷＥＢ販売：</p>" in regenerated
        assert "<p>窓口発売日：</p>" in regenerated
        assert '<a href="">チケットを買う<span></span></a>' in regenerated
        assert '<a href="">詳しく見る<span></span></a>' in regenerated

    def test_title_line_breaks_become_br(self):
        document = f"{EVENT_MARKERS.start}{EVENT_MARKERS.end}"

        regenerated = generate_events_html(document, [EventItem(title="First\nSecond")])

        assert "<h3>First<br>Second</h3>" in regenerated
        assert parse_events(regenerated)[0].title == "First\nSecond"

    def test_wrapped_title_survives_round_trip(self):
        """Test that a title wrapped only in the source gains no line break."""
        document = (
            f"{EVENT_MARKERS.start}\n"
            '<div class="event-in">\n'
            '    <h3>Spring Gala Concert\n'
            '        with Orchestra</h3>\n'
            '    <div class="event-in-flex">\n'
            '        <div><p>日時：5/3</p><p>開演 18:00</p></div>\n'
            '        <div class="event_btns"></div>\n'
            '    </div>\n'
            '</div>\n'
            f"{EVENT_MARKERS.end}"
        )

        events = parse_events(document)
        regenerated = generate_events_html(document, events)

        assert events[0].title == "Spring Gala Concert with Orchestra"
        assert "<h3>Spring Gala Concert with Orchestra</h3>" in regenerated
        assert [e.title for e in parse_events(regenerated)] == ["Spring Gala Concert with Orchestra"]

    def test_field_values_are_not_escaped(self):
        document = f"{EVENT_MARKERS.start}{EVENT_MARKERS.end}"
        event = EventItem(title="<strong>Gala</strong> &amp; Dinner")

        regenerated = generate_events_html(document, [event])

        assert "<h3><strong>Gala</strong> &amp; Dinner</h3>" in regenerated

    def test_generated_markup_structure(self, sample_page):
        """Test that every generated block is well-formed markup."""
        events = parse_events(sample_page) + [EventItem(title="Extra")]

        regenerated = generate_events_html(sample_page, events)
        soup = BeautifulSoup(_region(regenerated), 'html.parser')
        blocks = soup.find_all('div', class_='event-in')

        assert len(blocks) == 3
        for block in blocks:
            assert block.find('h3') is not None
            assert len(block.find('div', class_='event-in-flex').find('div').find_all('p')) == 4
            assert len(block.find('div', class_='event_btns').find_all('a')) == 2
