"""Shared fixtures: page fragments shaped like the sites being edited."""
import pytest

from editor.markers import EVENT_MARKERS, SCHEDULE_MARKERS


SAMPLE_PAGE = f"""<!DOCTYPE html>
<html lang="ja">
<head>
<meta charset="UTF-8">
<title>ホール イベント情報</title>
</head>
<body>
    <section class="event">
        <div class="event-in">
            <h3>チケット郵送停止のお知らせ</h3>
            <div class="event-in-flex">
                <div>
                    <p><a href="pdf/notice.pdf">詳細はこちら（PDF）</a></p>
                </div>
            </div>
        </div>
        {EVENT_MARKERS.start}
        <div class="event-in">
            <h3>新春にしきの亭<br>
                落語会</h3>
            <div class="event-in-flex">
                <div>
                    <p>日時：２０２６年１月１８日（日）</p>
                    <p>開演１４：００（開場１３：３０）</p>
                    <p>ＷＥＢ販売：１１月１日（土）１０：００～</p>
                    <p>窓口発売日：１１月２日（日）</p>
                </div>
                <div class="event_btns">
                    <div class="btn btn_bottom">
                        <a href="https://tickets.example.jp/nishiki">チケットを買う<span></span></a>
                    </div>
                    <div class="btn" style="margin-bottom: 25px;">
                        <a href="event/nishiki.html">詳しく見る<span></span></a>
                    </div>
                </div>
            </div>
        </div>


        <div class="event-in">
          <h3>New Year Tea Ceremony</h3>
          <div class="event-in-flex">
            <div>
              <p>日時：２０２６年２月１日（日）</p>
              <p>開場１０：００　開演１０：３０</p>
              <p>ＷＥＢ販売：１２月１日（月）</p>
            </div>
            <div class="event_btns">
              <div class="btn btn_bottom"><a href="https://tickets.example.jp/tea">チケットを買う<span></span></a></div>
              <div class="btn"><a href="event/tea.html">詳しく見る<span></span></a></div>
            </div>
          </div>
        </div>
        {EVENT_MARKERS.end}
    </section>
    <section class="year-event">
        {SCHEDULE_MARKERS.start}
                    <div class="year-event-text">
                        <h5>「ピアノ公開試弾会」</h5>
                        <p>２０２５年４月５日（土）・６日（日）<br>
                            ９：００～１７：００
                        </p>
                        <p class="close">終了しました</p>
                    </div>
                    <div class="year-event-text">
                        <h5>「夏休みこどもコンサート」</h5>
                        <p>２０２５年８月２日（土）<br>１４：００開演</p>
                    </div>
        {SCHEDULE_MARKERS.end}
    </section>
    <footer>
        <p>日時：お問い合わせは窓口まで</p>
    </footer>
</body>
</html>
"""


SCENARIO_PAGE = f"""<html><head></head><body>
{EVENT_MARKERS.start}
<div class="event-in">
    <h3>New Year Tea Ceremony</h3>
    <div class="event-in-flex">
        <div>
            <p>日時：2026-01-10</p>
            <p>開場 13:00 / 開演 13:30</p>
            <p>ＷＥＢ販売：2025-12-01</p>
            <p>窓口発売日：2025-12-02</p>
        </div>
        <div class="event_btns">
            <div class="btn btn_bottom"><a href="https://example.com/buy">チケットを買う<span></span></a></div>
            <div class="btn"><a href="https://example.com/tea">詳しく見る<span></span></a></div>
        </div>
    </div>
</div>
{EVENT_MARKERS.end}
<div class="schedule">
{SCHEDULE_MARKERS.start}
<div class="year-event-text">
    <h5>Piano Tryout Day</h5>
    <p>2025-04-05<br>9:00-17:00</p>
    <p class="close">終了しました</p>
</div>
{SCHEDULE_MARKERS.end}
</div>
</body></html>
"""


@pytest.fixture
def sample_page():
    """Page with an announcement block, two events and two schedule rows."""
    return SAMPLE_PAGE


@pytest.fixture
def scenario_page():
    """Page with exactly one event and one closed schedule row."""
    return SCENARIO_PAGE
