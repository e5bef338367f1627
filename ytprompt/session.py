# ytprompt/session.py
# YouTube is an SPA. We need to re-inject on navigation.
import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Callable, List

from .injector import CONTROL_BINDING, ControlHandler, InjectionScheduler
from .state import SessionContext, SessionState
from .utils import video_id_from_location

NAVIGATION_BINDING = "__ytPromptNavigate"

# Hooks the history API, popstate and DOM mutations. Mutations only cross into
# Python when the location changed or a watch page lost its control, and never
# while the previous mutation notice is still being handled.
NAVIGATION_OBSERVER_JS = """(() => {
    if (window !== window.top) return;
    if (window.__ytPromptObserverInstalled) return;
    window.__ytPromptObserverInstalled = true;

    const notify = (kind) => {
        try {
            return Promise.resolve(window.__ytPromptNavigate(kind, location.href));
        } catch (e) {
            return Promise.resolve();
        }
    };

    let lastHref = location.href;
    let mutationPending = false;
    const onMutation = () => {
        if (mutationPending) return;
        const moved = location.href !== lastHref;
        const onWatchPage = new URL(location.href).searchParams.get('v');
        if (!moved && !(onWatchPage && !document.querySelector('.yt-tc-wrap'))) return;
        lastHref = location.href;
        mutationPending = true;
        notify('mutation').catch(() => {}).finally(() => { mutationPending = false; });
    };

    for (const name of ['pushState', 'replaceState']) {
        const original = history[name];
        history[name] = function (...args) {
            const result = original.apply(this, args);
            notify(name);
            return result;
        };
    }

    window.addEventListener('popstate', () => notify('popstate'));

    const start = () => new MutationObserver(onMutation)
        .observe(document.documentElement, { childList: true, subtree: true });
    if (document.documentElement) start();
    else document.addEventListener('DOMContentLoaded', start);
})()"""


@dataclass(frozen=True)
class NavigationEvent:
    kind: str
    url: str


class NavigationEventSource:
    """Anything that can tell us the page may have navigated."""

    def __init__(self):
        self._handlers: List[Callable] = []

    def on_navigate(self, handler: Callable) -> None:
        self._handlers.append(handler)

    async def emit(self, event: NavigationEvent) -> None:
        for handler in list(self._handlers):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logging.error(f"[Navigation] Handler failed for {event.kind}: {e}", exc_info=True)


class PlaywrightNavigationSource(NavigationEventSource):
    """Feeds history hooks, popstate, DOM mutations and full loads of a Playwright page."""

    def __init__(self, page):
        super().__init__()
        self.page = page

    async def install(self) -> None:
        await self.page.expose_binding(NAVIGATION_BINDING, self._on_binding)
        await self.page.add_init_script(NAVIGATION_OBSERVER_JS)
        self.page.on("domcontentloaded", self._on_load)
        try:
            # Already-loaded document; later documents get the init script
            await self.page.evaluate(NAVIGATION_OBSERVER_JS)
        except Exception as e:
            logging.debug(f"[Navigation] Observer not installed on current document: {e}")

    async def _on_binding(self, source, kind: str, url: str) -> None:
        if source.get("frame") is not self.page.main_frame:
            # Embedded frames (live chat, ads) are not the watch page
            return
        await self.emit(NavigationEvent(kind, url))

    async def _on_load(self, page) -> None:
        await self.emit(NavigationEvent("load", page.url))


class NavigationWatcher:
    """Turns navigation notices into (re)injection for the video on screen."""

    def __init__(self, session: SessionContext, scheduler: InjectionScheduler):
        self.session = session
        self.scheduler = scheduler
        self._tasks = set()

    def listen(self, source: NavigationEventSource) -> None:
        source.on_navigate(self.handle)

    async def handle(self, event: NavigationEvent) -> None:
        if event.kind == "load":
            # New document, the previous control is gone with it
            self.session.reset()
        self.check(event.url)
        if event.kind == "mutation":
            # Also try inject in case the control got removed by re-render
            await self.scheduler.repair(event.url)

    def check(self, url: str) -> SessionState:
        """
        Runs on every notice, so it must stay cheap: when the video did not
        change it returns the current snapshot and does nothing else.
        """
        state = self.session.state
        video_id = video_id_from_location(url)
        if not video_id or video_id == state.last_seen_video_id:
            return state

        state = state.saw(video_id)
        self.session.state = state
        logging.info(f"[Navigation] Now watching {video_id}")
        self._schedule(self.scheduler.run(video_id))
        return state

    def _schedule(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


async def attach_session(page, mode: str = "prompt") -> NavigationWatcher:
    """Wires the watcher, the injection scheduler and the click handler into `page`."""
    session = SessionContext()
    scheduler = InjectionScheduler(page, session)
    handler = ControlHandler(page, mode=mode)
    await page.expose_binding(CONTROL_BINDING, handler.on_click)

    source = PlaywrightNavigationSource(page)
    watcher = NavigationWatcher(session, scheduler)
    watcher.listen(source)
    await source.install()

    # Page may already be showing a video
    watcher.check(page.url)
    return watcher
