"""Full-screen board - prompt_toolkit event loop around the controller."""

import logging

from prompt_toolkit.application import Application, get_app
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.mouse_events import MouseButton, MouseEvent, MouseEventType

from .controller import InteractionController, PointerEvent, PointerKind
from .render import render_frame

logger = logging.getLogger(__name__)

# prompt_toolkit key -> controller key name
NAMED_KEYS = {
    "left": "left",
    "right": "right",
    "up": "up",
    "down": "down",
    "escape": "esc",
    "tab": "tab",
    "enter": "enter",
    "backspace": "backspace",
}

POINTER_KINDS = {
    MouseEventType.MOUSE_DOWN: PointerKind.DOWN,
    MouseEventType.MOUSE_MOVE: PointerKind.MOVE,
    MouseEventType.MOUSE_UP: PointerKind.UP,
}


def to_pointer_event(mouse_event: MouseEvent) -> PointerEvent | None:
    """Translate a prompt_toolkit mouse event; scroll wheel events map to None."""
    kind = POINTER_KINDS.get(mouse_event.event_type)
    if kind is None:
        return None
    return PointerEvent(
        kind=kind,
        x=mouse_event.position.x,
        y=mouse_event.position.y,
        primary=mouse_event.button not in (MouseButton.RIGHT, MouseButton.MIDDLE),
    )


class BoardControl(FormattedTextControl):
    """Whole-screen control that forwards every mouse event to the controller."""

    def __init__(self, controller: InteractionController):
        super().__init__(self._fragments, focusable=True, show_cursor=False)
        self.controller = controller

    def _fragments(self):
        size = get_app().output.get_size()
        frame = render_frame(self.controller.snapshot(), size.columns, size.rows)
        self.controller.set_column_rects(frame.column_rects)

        fragments = []
        for i, line in enumerate(frame.lines):
            if i:
                fragments.append(("", "\n"))
            fragments.extend(line)
        return fragments

    def mouse_handler(self, mouse_event: MouseEvent):
        event = to_pointer_event(mouse_event)
        if event is None:
            return NotImplemented
        self.controller.handle_pointer(event)
        return None


def build_key_bindings(controller: InteractionController) -> KeyBindings:
    kb = KeyBindings()

    def forward(event, key: str) -> None:
        controller.handle_key(key)
        if controller.should_quit:
            event.app.exit()

    for pt_key, name in NAMED_KEYS.items():
        # Escape is eager so a lone ESC isn't held back waiting for a sequence
        @kb.add(pt_key, eager=pt_key == "escape")
        def _(event, name=name):
            forward(event, name)

    @kb.add("c-c")
    def _(event):
        logger.debug("Interrupted, leaving board")
        event.app.exit()

    @kb.add(Keys.Any)
    def _(event):
        key = event.data
        if len(key) == 1 and key.isprintable():
            forward(event, key)

    return kb


def build_application(controller: InteractionController, refresh_interval: float = 0.1) -> Application:
    """
    Create the board application.

    The periodic refresh keeps the clock and the meeting countdown current
    while no input arrives.
    """
    app = Application(
        layout=Layout(Window(content=BoardControl(controller), always_hide_cursor=True)),
        key_bindings=build_key_bindings(controller),
        full_screen=True,
        mouse_support=True,
        refresh_interval=refresh_interval,
    )
    app.ttimeoutlen = 0.05
    return app


def run_board(controller: InteractionController, refresh_interval: float = 0.1) -> None:
    """Run the board until the user quits. Blocks."""
    build_application(controller, refresh_interval).run()
