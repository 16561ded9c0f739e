from __future__ import annotations

import asyncio
import math
from typing import Callable, Iterable, Optional, Sequence

import flet as ft

from feedback import CLICK, CORRECT, FeedbackEvent, Particle
from utils import blend_hex_colors

PARTICLE_SIZE = 16
SHAKE_OFFSETS = (-0.025, 0.025, -0.025, 0.025, 0.0)


class ParticleLayer:
    """Overlay that turns particle records into short-lived dots."""

    def __init__(self, *, page: ft.Page, spawn: Callable[[Callable], Optional[asyncio.Task]]) -> None:
        self.page = page
        self.spawn = spawn
        self.controls: dict[int, ft.Container] = {}
        self.stack = ft.Stack(controls=[], expand=True)

    def burst(self, particles: Iterable[Particle]) -> None:
        fresh: list[tuple[Particle, ft.Container]] = []
        for particle in particles:
            dot = self._build_dot(particle)
            self.controls[particle.id] = dot
            self.stack.controls.append(dot)
            fresh.append((particle, dot))
        if fresh:
            self.page.update()
            self.spawn(lambda: self._fly(fresh))

    def sync(self, live: Sequence[Particle]) -> None:
        """Drop dots whose particle records have been retired."""
        live_ids = {particle.id for particle in live}
        for particle_id in [pid for pid in self.controls if pid not in live_ids]:
            dot = self.controls.pop(particle_id)
            if dot in self.stack.controls:
                self.stack.controls.remove(dot)

    def clear(self) -> None:
        self.controls.clear()
        self.stack.controls.clear()

    def _build_dot(self, particle: Particle) -> ft.Container:
        if particle.kind == CLICK:
            shape = ft.Container(
                width=PARTICLE_SIZE,
                height=PARTICLE_SIZE,
                border_radius=PARTICLE_SIZE,
                border=ft.border.all(2, "#33000000"),
            )
        else:
            shape = ft.Container(
                width=PARTICLE_SIZE,
                height=PARTICLE_SIZE,
                bgcolor=particle.color,
                border_radius=PARTICLE_SIZE if particle.kind == CORRECT else 0,
                rotate=ft.transform.Rotate(0 if particle.kind == CORRECT else math.pi / 4),
            )
        duration = 400 if particle.kind == CLICK else 800
        return ft.Container(
            content=shape,
            left=particle.x - PARTICLE_SIZE / 2,
            top=particle.y - PARTICLE_SIZE / 2,
            opacity=1.0,
            scale=0.5 if particle.kind == CLICK else 1.0,
            rotate=ft.transform.Rotate(0),
            animate_position=ft.animation.Animation(duration, ft.AnimationCurve.EASE_OUT),
            animate_opacity=ft.animation.Animation(duration, ft.AnimationCurve.EASE_OUT),
            animate_scale=ft.animation.Animation(duration, ft.AnimationCurve.EASE_OUT),
            animate_rotation=ft.animation.Animation(duration, ft.AnimationCurve.EASE_OUT),
        )

    async def _fly(self, fresh: list[tuple[Particle, ft.Container]]) -> None:
        try:
            await asyncio.sleep(0.02)
            for particle, dot in fresh:
                dot.left = particle.x + particle.dx - PARTICLE_SIZE / 2
                dot.top = particle.y + particle.dy - PARTICLE_SIZE / 2
                dot.opacity = 0.0
                dot.scale = 2.0 if particle.kind == CLICK else 0.0
                dot.rotate = ft.transform.Rotate(math.radians(particle.rotation))
            self.page.update()
        except asyncio.CancelledError:
            pass


class ShakeAnimator:
    """Jolts a control sideways for a wrong guess."""

    def __init__(self, *, page: ft.Page, target: ft.Control, step_ms: int = 80) -> None:
        self.page = page
        self.target = target
        self.step_ms = step_ms
        self.target.offset = ft.transform.Offset(0, 0)
        self.target.animate_offset = ft.animation.Animation(step_ms, ft.AnimationCurve.EASE_IN_OUT)

    async def shake(self) -> None:
        try:
            for dx in SHAKE_OFFSETS:
                self.target.offset = ft.transform.Offset(dx, 0)
                self.page.update()
                await asyncio.sleep(self.step_ms / 1000)
        except asyncio.CancelledError:
            pass
        finally:
            self.target.offset = ft.transform.Offset(0, 0)


class TimeDeltaView:
    """Floating "+2s" / "-3s" labels next to the clock."""

    def __init__(self, *, gain_color: str, loss_color: str) -> None:
        self.gain_color = gain_color
        self.loss_color = loss_color
        self.column = ft.Column(controls=[], spacing=0, tight=True)

    def render(self, events: Sequence[FeedbackEvent]) -> None:
        self.column.controls = [self._label(event) for event in events]

    def _label(self, event: FeedbackEvent) -> ft.Text:
        value = int(event.payload)
        text = f"+{value}s" if value > 0 else f"{value}s"
        return ft.Text(
            text,
            size=18,
            weight=ft.FontWeight.BOLD,
            color=self.gain_color if value > 0 else self.loss_color,
        )


def pulse_color(base: str, flash: str, step: int, steps: int) -> str:
    """Color for ``step`` of a flash that peaks halfway and fades back to ``base``."""
    t = math.sin(math.pi * min(1.0, step / steps)) if steps else 0.0
    return blend_hex_colors(base, flash, t)
