import asyncio

from tests.fakes import FakePage, WATCH_URL
from ytprompt.injector import CONTROL_BINDING, ControlHandler
from ytprompt.lookups import ANCHOR_SELECTORS
from ytprompt.session import (
    NAVIGATION_BINDING,
    NAVIGATION_OBSERVER_JS,
    NavigationEvent,
    NavigationEventSource,
    NavigationWatcher,
    PlaywrightNavigationSource,
    attach_session,
)
from ytprompt.state import SessionContext, SessionState

VIDEO_A = "https://www.youtube.com/watch?v=aaaaaaaaaaa"
VIDEO_B = "https://www.youtube.com/watch?v=bbbbbbbbbbb&t=10"
HOME = "https://www.youtube.com/"


class RecordingScheduler:
    """Records the session snapshot each call saw."""

    def __init__(self, session):
        self.session = session
        self.runs = []
        self.repairs = []

    async def run(self, video_id):
        self.runs.append((video_id, self.session.state))
        self.session.state = self.session.state.injected(video_id)
        return True

    async def repair(self, url):
        self.repairs.append(url)
        return True


def make_watcher(state=None):
    session = SessionContext(state)
    scheduler = RecordingScheduler(session)
    watcher = NavigationWatcher(session, scheduler)
    source = NavigationEventSource()
    watcher.listen(source)
    return watcher, source, session, scheduler


async def emit_all(source, *events):
    for event in events:
        await source.emit(event)
    # let scheduled injection loops run
    await asyncio.sleep(0)


def test_state_snapshots_are_immutable():
    first = SessionState()
    seen = first.saw("aaaaaaaaaaa")
    injected = seen.injected("aaaaaaaaaaa")

    assert first == SessionState()
    assert seen == SessionState("aaaaaaaaaaa", None)
    assert injected == SessionState("aaaaaaaaaaa", "aaaaaaaaaaa")
    assert injected.saw("bbbbbbbbbbb") == SessionState("bbbbbbbbbbb", None)


def test_new_video_schedules_injection_once():
    watcher, source, session, scheduler = make_watcher()

    asyncio.run(emit_all(
        source,
        NavigationEvent("pushState", VIDEO_A),
        NavigationEvent("replaceState", VIDEO_A),
        NavigationEvent("popstate", VIDEO_A + "&t=3"),
    ))

    assert [video for video, _ in scheduler.runs] == ["aaaaaaaaaaa"]
    assert session.state.last_seen_video_id == "aaaaaaaaaaa"


def test_navigation_clears_injection_before_scheduling():
    watcher, source, session, scheduler = make_watcher(
        SessionState("aaaaaaaaaaa", "aaaaaaaaaaa")
    )

    asyncio.run(emit_all(source, NavigationEvent("pushState", VIDEO_B)))

    video, seen_state = scheduler.runs[0]
    assert video == "bbbbbbbbbbb"
    assert seen_state == SessionState("bbbbbbbbbbb", None)


def test_check_without_change_has_no_side_effects():
    state = SessionState("aaaaaaaaaaa", "aaaaaaaaaaa")
    watcher, source, session, scheduler = make_watcher(state)

    async def check_many():
        results = [watcher.check(VIDEO_A), watcher.check(HOME), watcher.check("")]
        await asyncio.sleep(0)
        return results

    results = asyncio.run(check_many())

    assert all(result is state for result in results)
    assert session.state is state
    assert scheduler.runs == []


def test_mutation_also_repairs_control():
    watcher, source, session, scheduler = make_watcher(SessionState("aaaaaaaaaaa", "aaaaaaaaaaa"))

    asyncio.run(emit_all(source, NavigationEvent("mutation", VIDEO_A)))

    assert scheduler.runs == []
    assert scheduler.repairs == [VIDEO_A]


def test_full_load_starts_a_fresh_session():
    watcher, source, session, scheduler = make_watcher(SessionState("aaaaaaaaaaa", "aaaaaaaaaaa"))

    asyncio.run(emit_all(source, NavigationEvent("load", VIDEO_A)))

    video, seen_state = scheduler.runs[0]
    assert video == "aaaaaaaaaaa"
    assert seen_state.injected_for_video_id is None


def test_failing_handler_does_not_break_other_handlers():
    source = NavigationEventSource()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    source.on_navigate(broken)
    source.on_navigate(seen.append)

    asyncio.run(source.emit(NavigationEvent("popstate", HOME)))

    assert seen == [NavigationEvent("popstate", HOME)]


def recording_source(page):
    source = PlaywrightNavigationSource(page)
    events = []
    source.on_navigate(events.append)
    return source, events


def test_install_wires_page_hooks():
    page = FakePage()
    source, _ = recording_source(page)

    asyncio.run(source.install())

    assert page.bindings[NAVIGATION_BINDING] == source._on_binding
    assert page.init_scripts == [NAVIGATION_OBSERVER_JS]
    assert page.listeners["domcontentloaded"] == [source._on_load]
    # current document gets the observer too
    assert NAVIGATION_OBSERVER_JS in page.evaluations


def test_page_notices_become_navigation_events():
    page = FakePage()
    source, events = recording_source(page)
    asyncio.run(source.install())
    notify = page.bindings[NAVIGATION_BINDING]
    on_load = page.listeners["domcontentloaded"][0]

    async def drive():
        for kind in ("pushState", "replaceState", "popstate", "mutation"):
            await notify({"frame": page.main_frame, "page": page}, kind, VIDEO_A)
        await on_load(page)

    asyncio.run(drive())

    assert events == [
        NavigationEvent("pushState", VIDEO_A),
        NavigationEvent("replaceState", VIDEO_A),
        NavigationEvent("popstate", VIDEO_A),
        NavigationEvent("mutation", VIDEO_A),
        NavigationEvent("load", WATCH_URL),
    ]


def test_embedded_frame_notices_are_ignored():
    page = FakePage()
    source = PlaywrightNavigationSource(page)
    state = SessionState("aaaaaaaaaaa", "aaaaaaaaaaa")
    session = SessionContext(state)
    scheduler = RecordingScheduler(session)
    NavigationWatcher(session, scheduler).listen(source)
    chat_frame = object()

    asyncio.run(source._on_binding(
        {"frame": chat_frame, "page": page},
        "mutation",
        "https://www.youtube.com/live_chat?is_popout=1&v=bbbbbbbbbbb",
    ))

    assert session.state is state
    assert scheduler.runs == []
    assert scheduler.repairs == []


def test_attach_session_injects_on_current_watch_page():
    page = FakePage()
    page.set(ANCHOR_SELECTORS[0], page.anchor())

    async def attach():
        watcher = await attach_session(page, mode="transcript")
        for _ in range(3):
            await asyncio.sleep(0)
        return watcher

    watcher = asyncio.run(attach())

    handler = page.bindings[CONTROL_BINDING]
    assert isinstance(handler.__self__, ControlHandler)
    assert handler.__self__.mode == "transcript"
    assert NAVIGATION_BINDING in page.bindings
    assert watcher.session.state.last_seen_video_id == "abc123XYZ_-"
    assert watcher.session.state.injected_for_video_id == "abc123XYZ_-"
    assert page.controls() == 1
