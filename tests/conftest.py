import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from bracket_anything.adapters.mock_adapter import MockAdapter
from bracket_anything.core.context import ServiceContext
from bracket_anything.core.types import Question

LAKERS_EVENT = {
    "idEvent": "1001",
    "strEvent": "Los Angeles Lakers vs Boston Celtics",
    "strHomeTeam": "Los Angeles Lakers",
    "strAwayTeam": "Boston Celtics",
    "intHomeScore": "100",
    "intAwayScore": "95",
    "strVenue": "Crypto.com Arena",
    "strSeason": "2023-2024",
    "strLeague": "NBA",
    "strSport": "Basketball",
    "dateEvent": "2024-02-01",
}

OSCARS_HTML = """
<div class="mw-parser-output">
<h2><span class="mw-headline">Best Picture</span><span class="mw-editsection">[edit]</span></h2>
<ul>
  <li>Barbie</li>
  <li><b>Oppenheimer</b> – Emma Thomas</li>
</ul>
<h2><span class="mw-headline">Best Director</span></h2>
<ul><li><b>Christopher Nolan</b> – Oppenheimer</li></ul>
<table class="wikitable">
  <tr><th>Category</th><th>Winner</th></tr>
  <tr><td>Best Actress</td><td><b>Emma Stone</b><sup class="reference">[1]</sup></td></tr>
  <tr class="winner-row"><td>Best Original Song</td><td>What Was I Made For?</td></tr>
  <tr style="background:#FFE6A0"><td>Best Original Score</td><td>Ludwig Göransson</td></tr>
</table>
</div>
"""


class FakeSports:
    def __init__(self, events=None, search=None):
        self.events = events if events is not None else [LAKERS_EVENT]
        self.search = search if search is not None else [LAKERS_EVENT]
        self.lookups: list[str] = []

    async def search_events(self, query):
        return {"event": self.search}

    async def lookup_event(self, event_id):
        self.lookups.append(event_id)
        return {"events": [e for e in self.events if e["idEvent"] == event_id]}


class FakeWikipedia:
    def __init__(self, html=OSCARS_HTML, title="96th Academy Awards", error=None):
        self.html = html
        self.title = title
        self.error = error
        self.pages: list[str] = []

    async def opensearch(self, query):
        return [
            query,
            ["96th Academy Awards", "95th Academy Awards"],
            ["Ceremony held in 2024", ""],
            ["https://en.wikipedia.org/wiki/96th_Academy_Awards", ""],
        ]

    async def parse_page(self, page_title):
        self.pages.append(page_title)
        if self.error:
            return {"error": {"code": "missingtitle", "info": self.error}}
        return {"parse": {"title": self.title, "text": {"*": self.html}}}


@pytest.fixture()
def game_questions():
    return [
        Question(id="q1", type="multiple", text="Who won the game?", points=10,
                 options=["Los Angeles Lakers", "Boston Celtics"]),
        Question(id="q2", type="open", text="What was the final score?", points=5),
        Question(id="q3", type="open", text="Where was the game played?", points=3),
        Question(id="q4", type="open", text="How many fans wore purple hats?", points=2),
    ]


@pytest.fixture()
def fake_context():
    return ServiceContext(chat=MockAdapter(), sports=FakeSports(), wikipedia=FakeWikipedia())
