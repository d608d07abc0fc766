import asyncio

import pytest

from whiteboard.mathtext import ResponseDisplay, Segment, has_math, split_math


class FakeTypesetter:
    def __init__(self, ready_after=0, fail=False):
        self.ready_after = ready_after
        self.polls = 0
        self.fail = fail
        self.rendered = []

    def is_ready(self):
        self.polls += 1
        return self.polls > self.ready_after

    def typeset(self, segments):
        if self.fail:
            raise RuntimeError("typesetter crashed")
        self.rendered.append(list(segments))


def test_split_inline_and_display():
    segs = split_math("Area is $\\pi r^2$ and\n$$E = mc^2$$ done")
    assert segs == [
        Segment("text", "Area is "),
        Segment("inline", "\\pi r^2"),
        Segment("text", " and\n"),
        Segment("display", "E = mc^2"),
        Segment("text", " done"),
    ]


def test_split_bracket_delimiters():
    segs = split_math("a \\(x+1\\) b \\[y\\]")
    assert [s.kind for s in segs] == ["text", "inline", "text", "display"]
    assert segs[1].value == "x+1"
    assert segs[3].value == "y"


def test_unterminated_and_escaped_dollars_stay_text():
    assert split_math("costs $5") == [Segment("text", "costs $5")]
    assert split_math("\\$5 and \\$6") == [Segment("text", "$5 and $6")]
    assert split_math("$$ $$") == [Segment("text", "$$ $$")]
    assert not has_math("plain text")
    assert has_math("x = $1$")


def test_empty_text():
    assert split_math("") == []


@pytest.mark.asyncio
async def test_typeset_polls_until_ready():
    ts = FakeTypesetter(ready_after=3)
    display = ResponseDisplay(ts, settle_delay=0, interval=0)
    display.text = "x $y$"
    display.segments = split_math(display.text)
    assert await display.typeset() is True
    assert ts.polls == 4
    assert ts.rendered == [[Segment("text", "x "), Segment("inline", "y")]]


@pytest.mark.asyncio
async def test_typeset_gives_up_after_bounded_attempts():
    ts = FakeTypesetter(ready_after=1000)
    display = ResponseDisplay(ts, settle_delay=0, interval=0, max_attempts=5)
    display.segments = split_math("$a$")
    assert await display.typeset() is False
    assert ts.polls == 5
    assert ts.rendered == []


@pytest.mark.asyncio
async def test_typesetter_error_is_not_raised():
    display = ResponseDisplay(FakeTypesetter(fail=True), settle_delay=0, interval=0)
    assert await display.typeset() is False


@pytest.mark.asyncio
async def test_update_schedules_and_close_cancels():
    ts = FakeTypesetter()
    display = ResponseDisplay(ts, settle_delay=10, interval=0)
    display.update("first $a$")
    assert display.pending
    display.close()
    assert not display.pending
    await asyncio.sleep(0)
    assert ts.rendered == []


@pytest.mark.asyncio
async def test_new_update_replaces_pending_task():
    ts = FakeTypesetter()
    display = ResponseDisplay(ts, settle_delay=0, interval=0)
    display.update("old $a$")
    display.update("new $b$")
    for _ in range(5):
        await asyncio.sleep(0)
    assert ts.rendered == [[Segment("text", "new "), Segment("inline", "b")]]


def test_update_without_loop_typesets_inline():
    ts = FakeTypesetter()
    display = ResponseDisplay(ts, settle_delay=0, interval=0)
    display.update("x $y$")
    assert display.text == "x $y$"
    assert not display.pending
    assert ts.rendered == [[Segment("text", "x "), Segment("inline", "y")]]


def test_update_without_loop_waits_for_typesetter():
    ts = FakeTypesetter(ready_after=2)
    display = ResponseDisplay(ts, settle_delay=0, interval=0)
    display.update("$a$")
    assert ts.polls == 3
    assert ts.rendered == [[Segment("inline", "a")]]


def test_blocking_typeset_gives_up_after_bounded_attempts():
    ts = FakeTypesetter(ready_after=1000)
    display = ResponseDisplay(ts, settle_delay=0, interval=0, max_attempts=4)
    display.update("$a$")
    assert ts.polls == 4
    assert ts.rendered == []
