import asyncio
import inspect
import logging
from concurrent.futures import Future
from typing import Any, Callable, Optional

import flet as ft

from animations import ParticleLayer, ShakeAnimator, TimeDeltaView, pulse_color
from audio import play_feedback_sound
from config import (
    ACCENT_DARK,
    ACCENT_VIOLET,
    CARD_BG,
    LOG_LEVEL,
    NEUTRAL_BG,
    TEXT_MUTED,
    TEXT_PRIMARY,
    TIME_COLOR,
    TIME_GAIN_COLOR,
    TIME_WARNING_COLOR,
    TIME_WARNING_THRESHOLD,
    TROPHY_COLOR,
)
from feedback import FeedbackEvent
from game import GAMEOVER, IDLE, PLAYING, ColorSenseEngine, SessionSnapshot
from palette import Grid
from scoring import critique_for, level_for
from utils import ideal_text_color

logger = logging.getLogger(__name__)


class ColorSenseApp:
    """Flet front end for the odd-swatch game."""

    def __init__(self, page: ft.Page) -> None:
        self.page = page
        self.engine = ColorSenseEngine(on_sound=lambda kind: play_feedback_sound(kind))
        self.engine.subscribe(self._on_snapshot)
        self.engine.feedback.subscribe(self._on_feedback)
        self.engine.feedback.on_retire(self._on_retire)

        self.pointer: tuple[float, float] = (0.0, 0.0)

        # Async tasks
        self.shake_task: Optional[Any] = None
        self.pulse_task: Optional[Any] = None
        self._tracked_tasks: set[asyncio.Task] = set()
        self._tracked_futures: set[Future] = set()

        # UI controls (initialised in setup)
        self.score_text: Optional[ft.Text] = None
        self.timer_text: Optional[ft.Text] = None
        self.sound_button: Optional[ft.IconButton] = None
        self.cheat_button: Optional[ft.OutlinedButton] = None
        self.board: Optional[ft.Container] = None
        self.grid_column: Optional[ft.Column] = None
        self.overlay: Optional[ft.Container] = None
        self.diff_panel: Optional[ft.Container] = None
        self.particles: Optional[ParticleLayer] = None
        self.time_deltas: Optional[TimeDeltaView] = None
        self.shaker: Optional[ShakeAnimator] = None
        self._drawn_grid: Optional[Grid] = None
        self._drawn_cheat: bool = False

    async def setup(self) -> None:
        self.page.title = "Color Sense"
        self.page.theme_mode = ft.ThemeMode.LIGHT
        self.page.padding = 24
        self.page.bgcolor = NEUTRAL_BG
        self.page.horizontal_alignment = ft.CrossAxisAlignment.CENTER
        self.page.on_close = self._on_page_close

        self.particles = ParticleLayer(page=self.page, spawn=self._spawn)
        self.time_deltas = TimeDeltaView(gain_color=TIME_GAIN_COLOR, loss_color=TIME_WARNING_COLOR)

        content = ft.Column(
            controls=[
                self._build_header(),
                self._build_stats_row(),
                self._build_board(),
                self._build_controls_row(),
                self._build_diff_panel(),
                ft.Text(
                    "DESIGNED FOR VISUAL PRECISION & ARTISTIC TRAINING",
                    size=10,
                    color=TEXT_MUTED,
                    text_align=ft.TextAlign.CENTER,
                ),
            ],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            spacing=20,
            scroll=ft.ScrollMode.AUTO,
        )

        root = ft.GestureDetector(
            content=ft.Stack(controls=[content, self.particles.stack], expand=True),
            on_hover=self._track_pointer,
            expand=True,
        )
        self.shaker = ShakeAnimator(page=self.page, target=self.board)
        self.page.add(root)
        self._render(self.engine.snapshot)

    # ------------------------------------------------------------------#
    # Layout
    # ------------------------------------------------------------------#

    def _build_header(self) -> ft.Control:
        self.sound_button = ft.IconButton(
            icon="volume_up_rounded",
            on_click=lambda e: self._spawn(self._toggle_sound),
        )
        title = ft.Text(
            spans=[
                ft.TextSpan("COLOR", ft.TextStyle(weight=ft.FontWeight.BOLD)),
                ft.TextSpan("SENSE", ft.TextStyle(italic=True, weight=ft.FontWeight.W_300)),
            ],
            size=48,
            color=TEXT_PRIMARY,
        )
        subtitle = ft.Text("COLOR SENSITIVITY CHALLENGE", size=12, color=TEXT_MUTED)
        return ft.Row(
            controls=[
                ft.Column([title, subtitle], horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=2),
                self.sound_button,
            ],
            alignment=ft.MainAxisAlignment.CENTER,
            width=440,
        )

    def _build_stats_row(self) -> ft.Control:
        self.score_text = ft.Text("0", size=24, weight=ft.FontWeight.BOLD, color=TEXT_PRIMARY)
        self.timer_text = ft.Text("15s", size=24, weight=ft.FontWeight.BOLD, color=TIME_COLOR)

        def card(icon: str, label: str, value: ft.Control, extra: Optional[ft.Control] = None) -> ft.Container:
            controls: list[ft.Control] = [
                ft.Row([ft.Icon(icon, size=18, color=TEXT_MUTED), ft.Text(label, size=12, color=TEXT_MUTED)]),
                value,
            ]
            if extra is not None:
                controls.insert(1, extra)
            return ft.Container(
                content=ft.Row(controls, alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                bgcolor=CARD_BG,
                padding=16,
                border_radius=16,
                border=ft.border.all(1, "#0d000000"),
                expand=True,
            )

        return ft.Row(
            controls=[
                card("emoji_events_rounded", "SCORE", self.score_text),
                card("timer_rounded", "TIME", self.timer_text, self.time_deltas.column),
            ],
            width=440,
            spacing=16,
        )

    def _build_board(self) -> ft.Container:
        self.grid_column = ft.Column(spacing=8, expand=True)
        self.overlay = ft.Container(left=0, top=0, right=0, bottom=0, border_radius=16, visible=False)
        self.board = ft.Container(
            content=ft.Stack(
                controls=[
                    ft.Container(content=self.grid_column, left=0, top=0, right=0, bottom=0),
                    self.overlay,
                ]
            ),
            width=440,
            height=440,
            padding=12,
            bgcolor=CARD_BG,
            border_radius=24,
            border=ft.border.all(1, "#1a000000"),
            shadow=ft.BoxShadow(blur_radius=24, color="#22000000", offset=ft.Offset(0, 12)),
        )
        return self.board

    def _build_controls_row(self) -> ft.Control:
        self.cheat_button = ft.OutlinedButton(
            "SHOW TARGET",
            icon="visibility_rounded",
            style=ft.ButtonStyle(shape=ft.RoundedRectangleBorder(radius=12)),
            on_click=lambda e: self._spawn(self._toggle_cheat),
            expand=True,
            height=44,
        )
        home_button = ft.OutlinedButton(
            content=ft.Icon("refresh_rounded"),
            style=ft.ButtonStyle(shape=ft.RoundedRectangleBorder(radius=12)),
            on_click=lambda e: self._spawn(self._return_home),
            height=44,
        )
        return ft.Row(controls=[self.cheat_button, home_button], width=440, spacing=8)

    def _build_diff_panel(self) -> ft.Container:
        self.diff_panel = ft.Container(
            bgcolor=CARD_BG,
            padding=16,
            border_radius=16,
            width=440,
            visible=False,
        )
        return self.diff_panel

    def _idle_view(self) -> ft.Control:
        return ft.Column(
            controls=[
                ft.Icon("bolt_rounded", size=48, color=ACCENT_DARK),
                ft.Text("Ready to test your eye?", size=24, weight=ft.FontWeight.BOLD),
                ft.Text(
                    f"Find the one swatch in the {self.engine.grid_size}x{self.engine.grid_size} grid that "
                    "differs slightly. The difference shrinks as your score climbs.",
                    size=14,
                    color=TEXT_MUTED,
                    text_align=ft.TextAlign.CENTER,
                ),
                ft.FilledButton(
                    "START",
                    style=ft.ButtonStyle(shape=ft.RoundedRectangleBorder(radius=12)),
                    on_click=lambda e: self._spawn(self._start_round),
                    width=320,
                    height=52,
                ),
            ],
            alignment=ft.MainAxisAlignment.CENTER,
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            spacing=16,
        )

    def _gameover_view(self, snapshot: SessionSnapshot) -> ft.Control:
        def stat(label: str, value: int) -> ft.Container:
            return ft.Container(
                content=ft.Column(
                    [
                        ft.Text(label, size=10, color=TEXT_MUTED),
                        ft.Text(str(value), size=36, weight=ft.FontWeight.BOLD, color=TEXT_PRIMARY),
                    ],
                    horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                ),
                bgcolor=CARD_BG,
                padding=16,
                border_radius=20,
                expand=True,
            )

        return ft.Column(
            controls=[
                ft.Icon("emoji_events_rounded", size=64, color=TROPHY_COLOR),
                ft.Text("Challenge Report", size=26, weight=ft.FontWeight.W_900, color=TEXT_PRIMARY),
                ft.Row([stat("SCORE", snapshot.score), stat("LEVEL", level_for(snapshot.score))]),
                ft.Text(f"Best: {snapshot.best_score}", size=14, color=TEXT_MUTED),
                ft.Container(
                    content=ft.Text(critique_for(snapshot.score), size=13, italic=True, color=TEXT_MUTED),
                    border=ft.border.all(1, ACCENT_VIOLET + "33"),
                    border_radius=16,
                    padding=12,
                ),
                ft.FilledButton(
                    "TRY AGAIN",
                    icon="refresh_rounded",
                    on_click=lambda e: self._spawn(self._start_round),
                    width=320,
                ),
                ft.OutlinedButton(
                    "HOME",
                    on_click=lambda e: self._spawn(self._return_home),
                    width=320,
                ),
            ],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            spacing=10,
            scroll=ft.ScrollMode.AUTO,
        )

    # ------------------------------------------------------------------#
    # Rendering
    # ------------------------------------------------------------------#

    def _on_snapshot(self, snapshot: SessionSnapshot) -> None:
        self._render(snapshot)

    def _render(self, snapshot: SessionSnapshot) -> None:
        self.score_text.value = str(snapshot.score)
        self.timer_text.value = f"{snapshot.time_remaining}s"
        self.timer_text.color = (
            TIME_WARNING_COLOR if snapshot.time_remaining < TIME_WARNING_THRESHOLD else TIME_COLOR
        )
        self.sound_button.icon = "volume_up_rounded" if snapshot.sound_enabled else "volume_off_rounded"
        self.cheat_button.disabled = snapshot.state != PLAYING
        self.cheat_button.text = "HIDE TARGET" if snapshot.cheat_mode else "SHOW TARGET"
        self.cheat_button.icon = "visibility_off_rounded" if snapshot.cheat_mode else "visibility_rounded"

        self._render_grid(snapshot)
        if snapshot.state == IDLE:
            self.overlay.content = self._idle_view()
            self.overlay.bgcolor = "#e6ffffff"
            self.overlay.visible = True
        elif snapshot.state == GAMEOVER:
            self.overlay.content = self._gameover_view(snapshot)
            self.overlay.bgcolor = NEUTRAL_BG
            self.overlay.visible = True
        else:
            self.overlay.visible = False
        self._render_diff_panel(snapshot)
        self.time_deltas.render(self.engine.feedback.time_feedbacks)
        self.page.update()

    def _render_grid(self, snapshot: SessionSnapshot) -> None:
        grid = self.engine.grid
        if grid is self._drawn_grid and snapshot.cheat_mode == self._drawn_cheat:
            return
        self._drawn_grid = grid
        self._drawn_cheat = snapshot.cheat_mode
        self.grid_column.controls = []
        if grid is None:
            return
        for row in grid.rows():
            tiles = []
            for cell in row:
                reveal = snapshot.cheat_mode and cell.is_target
                tile = ft.Container(
                    bgcolor=cell.color.hex,
                    border_radius=8,
                    border=ft.border.all(4, ACCENT_DARK) if reveal else None,
                    expand=True,
                    animate=ft.animation.Animation(200, ft.AnimationCurve.EASE_IN_OUT),
                )
                tiles.append(
                    ft.GestureDetector(
                        content=tile,
                        on_tap_down=self._create_cell_handler(cell.index),
                        expand=True,
                    )
                )
            self.grid_column.controls.append(ft.Row(tiles, spacing=8, expand=True))

    def _render_diff_panel(self, snapshot: SessionSnapshot) -> None:
        pair = self.engine.pair
        if pair is None or snapshot.state != PLAYING:
            self.diff_panel.visible = False
            return

        def swatch(color_hex: str, label: str) -> ft.Control:
            return ft.Container(
                content=ft.Text(label, size=10, color=ideal_text_color(color_hex)),
                bgcolor=color_hex,
                height=32,
                border_radius=6,
                alignment=ft.alignment.center,
                expand=True,
            )

        self.diff_panel.content = ft.Column(
            [
                ft.Row([ft.Icon("info_outline_rounded", size=14), ft.Text("COLOR DIFFERENCE", size=10)]),
                ft.Row(
                    [
                        swatch(pair.base.hex, "BASE"),
                        ft.Text(f"Δ {pair.delta}%", size=12, weight=ft.FontWeight.BOLD),
                        swatch(pair.target.hex, "TARGET"),
                    ],
                    spacing=16,
                ),
            ]
        )
        self.diff_panel.visible = True

    def _on_feedback(self, event: FeedbackEvent) -> None:
        if event.is_time_delta:
            return
        self.particles.burst(self.engine.feedback.particles_for(event.id))

    def _on_retire(self) -> None:
        self.particles.sync(self.engine.feedback.particles)
        self.time_deltas.render(self.engine.feedback.time_feedbacks)
        self.page.update()

    # ------------------------------------------------------------------#
    # Handlers
    # ------------------------------------------------------------------#

    def _track_pointer(self, event: ft.HoverEvent) -> None:
        self.pointer = (event.global_x, event.global_y)

    def _create_cell_handler(self, index: int) -> Callable[[ft.TapEvent], None]:
        async def handler(event: ft.TapEvent) -> None:
            await self._on_cell_selected(index, (event.global_x, event.global_y))

        def wrapper(event: ft.TapEvent) -> None:
            self._spawn(lambda: handler(event))

        return wrapper

    async def _on_cell_selected(self, index: int, position: tuple[float, float]) -> None:
        outcome = self.engine.submit_guess(index, position)
        if outcome is None:
            return
        if outcome.hit:
            self._cancel_task(self.pulse_task)
            self.pulse_task = self._spawn(self._pulse_score)
        elif self.engine.feedback.shaking:
            self._cancel_task(self.shake_task)
            self.shake_task = self._spawn(self.shaker.shake)

    async def _start_round(self) -> None:
        self.engine.start_round(self.pointer)

    async def _return_home(self) -> None:
        self.engine.return_home(self.pointer)

    async def _toggle_cheat(self) -> None:
        self.engine.set_cheat_mode(not self.engine.cheat_mode, self.pointer)

    async def _toggle_sound(self) -> None:
        self.engine.toggle_sound(not self.engine.sound_enabled, self.pointer)

    async def _pulse_score(self, steps: int = 8, interval: float = 0.035) -> None:
        try:
            for step in range(steps + 1):
                self.score_text.color = pulse_color(TEXT_PRIMARY, TIME_GAIN_COLOR, step, steps)
                self.page.update()
                await asyncio.sleep(interval)
        except asyncio.CancelledError:
            pass
        finally:
            self.score_text.color = TEXT_PRIMARY

    # ------------------------------------------------------------------#
    # Task plumbing
    # ------------------------------------------------------------------#

    def _cancel_all_tasks(self) -> None:
        self._cancel_task(self.shake_task)
        self._cancel_task(self.pulse_task)
        self.shake_task = None
        self.pulse_task = None
        for task in list(self._tracked_tasks):
            self._cancel_task(task)
        for future in list(self._tracked_futures):
            future.cancel()
            self._tracked_futures.discard(future)

    def _cancel_task(self, task: Optional[Any]) -> None:
        if task is None:
            return
        if isinstance(task, asyncio.Task):
            if not task.done():
                task.cancel()
            self._tracked_tasks.discard(task)
        elif isinstance(task, Future):
            task.cancel()
            self._tracked_futures.discard(task)

    def _on_page_close(self, _: ft.ControlEvent) -> None:
        self._cancel_all_tasks()
        self.engine.close()
        self.particles.clear()

    def _spawn(self, target: Any) -> Optional[Any]:
        run_task = getattr(self.page, "run_task", None)
        if callable(run_task):
            if inspect.iscoroutinefunction(target):
                future = run_task(target)
            else:
                coro = target() if callable(target) else target
                if not inspect.iscoroutine(coro):
                    return None

                async def runner() -> None:
                    await coro

                future = run_task(runner)

            if isinstance(future, Future):
                self._tracked_futures.add(future)
                future.add_done_callback(lambda f: self._tracked_futures.discard(f))
            return future

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        coro = target() if callable(target) else target
        if not inspect.iscoroutine(coro):
            return None
        if loop is None:
            logger.warning("No running event loop; dropping task")
            coro.close()
            return None
        task = loop.create_task(coro)
        self._tracked_tasks.add(task)
        task.add_done_callback(lambda t: self._tracked_tasks.discard(t))
        return task


async def main(page: ft.Page) -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = ColorSenseApp(page)
    await app.setup()


def run() -> None:
    ft.app(target=main)


if __name__ == "__main__":
    run()
