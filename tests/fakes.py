"""Small stand-ins for Playwright's Page and ElementHandle."""
from ytprompt.injector import MOUNT_CONTROL_JS
from ytprompt.lookups import CONTROL_SELECTOR
from ytprompt.ui import COPY_TO_CLIPBOARD_JS, SHOW_TOAST_JS

WATCH_URL = "https://www.youtube.com/watch?v=abc123XYZ_-"


class FakeElement:
    def __init__(self, text="", attrs=None, disabled=False, box=(120, 36), on_click=None, on_evaluate=None):
        self.text = text
        self.attrs = attrs or {}
        self.disabled = disabled
        self.box = box
        self.on_click = on_click
        self.on_evaluate = on_evaluate
        self.clicks = 0

    async def text_content(self):
        return self.text

    async def get_attribute(self, name):
        return self.attrs.get(name)

    async def is_disabled(self):
        return self.disabled

    async def bounding_box(self):
        if self.box is None:
            return None
        width, height = self.box
        return {"x": 0, "y": 0, "width": width, "height": height}

    async def dispatch_event(self, event_type):
        self.clicks += 1
        if self.on_click:
            self.on_click()

    async def evaluate(self, script, arg=None):
        if self.on_evaluate:
            return self.on_evaluate(script, arg)
        return None


class FakePage:
    def __init__(self, url=WATCH_URL):
        self.url = url
        self.elements = {}
        self.evaluate_results = {}
        self.evaluations = []
        self.scripts = []
        self.toasts = []
        self.clipboard = []
        self.clipboard_ok = True
        self.mounts = 0
        self.main_frame = object()
        self.bindings = {}
        self.init_scripts = []
        self.listeners = {}

    async def expose_binding(self, name, callback):
        self.bindings[name] = callback

    async def add_init_script(self, script):
        self.init_scripts.append(script)

    def on(self, event, handler):
        self.listeners.setdefault(event, []).append(handler)

    def set(self, selector, *elements):
        self.elements[selector] = list(elements)

    async def query_selector(self, selector):
        found = self.elements.get(selector) or []
        return found[0] if found else None

    async def query_selector_all(self, selector):
        return list(self.elements.get(selector) or [])

    async def eval_on_selector_all(self, selector, script):
        return list(self.scripts)

    async def evaluate(self, script, arg=None):
        if script == SHOW_TOAST_JS:
            self.toasts.append(arg[0])
            return None
        if script == COPY_TO_CLIPBOARD_JS:
            self.clipboard.append(arg)
            return self.clipboard_ok
        self.evaluations.append(script)
        return self.evaluate_results.get(script)

    def anchor(self):
        """An element that behaves like the action bar when the control is mounted on it."""
        def mount(script, arg):
            assert script == MOUNT_CONTROL_JS
            self.mounts += 1
            # The mount script removes every stale control first
            self.set(CONTROL_SELECTOR, FakeElement("Copy prompt + transcript"))
            return True
        return FakeElement(on_evaluate=mount)

    def controls(self):
        return len(self.elements.get(CONTROL_SELECTOR) or [])
