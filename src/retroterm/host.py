"""pygame host for the terminal.

Builds one terminal instance from Settings, opens the window, and runs
three cooperative tasks on a single event loop: the renderer's frame
loop, the session's boot sequence, and the host event pump that feeds
key and resize events to the router and renderer.
"""

from __future__ import annotations

import asyncio
import logging

import pygame

from retroterm.config.settings import Settings
from retroterm.grid.store import GridStore
from retroterm.grid.writer import TextWriter
from retroterm.keyboard.router import InputRouter
from retroterm.remote.base import CommandTransport
from retroterm.remote.http_transport import HttpCommandTransport
from retroterm.remote.session import RemoteSession
from retroterm.render.base import Surface
from retroterm.render.renderer import Renderer

logger = logging.getLogger(__name__)

EVENT_POLL_INTERVAL = 1 / 120

# Named keys use browser KeyboardEvent.key names, so any of them can be
# set as terminal.delete_key or terminal.submit_key.
KEY_NAMES = {
    pygame.K_RETURN: "Enter",
    pygame.K_KP_ENTER: "Enter",
    pygame.K_BACKSPACE: "Backspace",
    pygame.K_DELETE: "Delete",
    pygame.K_TAB: "Tab",
    pygame.K_INSERT: "Insert",
    pygame.K_HOME: "Home",
    pygame.K_END: "End",
    pygame.K_PAGEUP: "PageUp",
    pygame.K_PAGEDOWN: "PageDown",
    pygame.K_UP: "ArrowUp",
    pygame.K_DOWN: "ArrowDown",
    pygame.K_LEFT: "ArrowLeft",
    pygame.K_RIGHT: "ArrowRight",
    pygame.K_F1: "F1",
    pygame.K_F2: "F2",
    pygame.K_F3: "F3",
    pygame.K_F4: "F4",
    pygame.K_F5: "F5",
    pygame.K_F6: "F6",
    pygame.K_F7: "F7",
    pygame.K_F8: "F8",
    pygame.K_F9: "F9",
    pygame.K_F10: "F10",
    pygame.K_F11: "F11",
    pygame.K_F12: "F12",
}


def key_name(event: pygame.event.Event) -> str:
    """Translate a KEYDOWN event into the router's key name."""
    return KEY_NAMES.get(event.key, event.unicode)


class TerminalHost:
    """Owns one terminal instance and the window it is drawn in."""

    def __init__(
        self,
        settings: Settings,
        surface: Surface | None = None,
        transport: CommandTransport | None = None,
    ) -> None:
        term = settings.terminal
        disp = settings.display
        svc = settings.service

        self.store = GridStore(cols=term.cols, rows=term.rows, default_color=term.default_color)
        self.writer = TextWriter(self.store)
        self.transport = transport or HttpCommandTransport(
            endpoint_url=svc.endpoint_url,
            method=svc.method,
            timeout=svc.timeout,
            recipient_header=svc.recipient_header,
        )
        self.session = RemoteSession(
            writer=self.writer,
            transport=self.transport,
            prompt_prefix=term.prompt_prefix,
            text_color=term.default_color,
            error_color=term.error_color,
            demo_delay=svc.demo_delay,
            reset_command=svc.reset_command,
            next_command=svc.next_command,
            sentinel=svc.completion_sentinel,
        )
        self.router = InputRouter(
            self.session, delete_key=term.delete_key, submit_key=term.submit_key
        )
        if surface is None:
            from retroterm.render.pygame_surface import PygameSurface

            surface = PygameSurface(
                width=disp.width,
                height=disp.height,
                window_title=disp.window_title,
                fullscreen=disp.fullscreen,
            )
        self.surface = surface
        self.renderer = Renderer(
            store=self.store,
            surface=self.surface,
            session=self.session,
            background_color=term.background_color,
            font_family=disp.font_family,
            font_scale=disp.font_scale,
            fps=disp.fps,
            blink_period=disp.blink_period,
        )
        self._running = False
        self._command_tasks: set[asyncio.Task[None]] = set()

    @property
    def is_running(self) -> bool:
        return self._running

    async def run(self) -> None:
        """Open the window and run until the user closes it."""
        self.surface.open()
        self.renderer.on_resize()
        self._running = True

        render_task = asyncio.create_task(self.renderer.run())
        boot_task = asyncio.create_task(self.session.start())
        boot_task.add_done_callback(self._report_task)
        try:
            await self._pump_events()
        finally:
            self._running = False
            self.renderer.stop()
            tasks = [render_task, boot_task, *self._command_tasks]
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await self.session.close()
            self.surface.close()
            logger.info("Terminal host stopped")

    def stop(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.stop()
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.stop()
                return
            task = self.router.handle_key(key_name(event))
            if task is not None:
                self._command_tasks.add(task)
                task.add_done_callback(self._command_tasks.discard)
                task.add_done_callback(self._report_task)
        elif event.type == pygame.VIDEORESIZE:
            logger.info("Window resized to %dx%d", event.w, event.h)
            resize = getattr(self.surface, "resize", None)
            if resize is not None:
                resize(event.w, event.h)
            self.renderer.on_resize()

    async def _pump_events(self) -> None:
        while self._running:
            for event in pygame.event.get():
                self.handle_event(event)
            await asyncio.sleep(EVENT_POLL_INTERVAL)

    @staticmethod
    def _report_task(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Session task failed: %s", exc, exc_info=exc)
