"""
Pygame Renderer
===============

Draws GameSnapshot frames: starfield, ship segments, gems, obstacles,
shockwaves, HUD and the modal overlay panels.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from fraction_racer.racer_core.state_snapshot import ChargeOverlay, GameSnapshot, MathOverlay


class PygameRenderer:
    """
    Renderer for the play window.

    Only reads the snapshot. Until attach() is given a surface, has_surface()
    is False and the loop driver skips frames.
    """

    def __init__(self, answer_text=None):
        """
        Initialize renderer.

        Args:
            answer_text: Optional callable returning the text typed so far,
                shown in the overlay answer box.
        """
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame is required for PygameRenderer")

        if not pygame.get_init():
            pygame.init()
        pygame.font.init()

        self._screen: Optional[pygame.Surface] = None
        self._layer: Optional[pygame.Surface] = None
        self._answer_text = answer_text

        self._font = pygame.font.Font(None, 32)
        self._font_large = pygame.font.Font(None, 56)
        self._font_small = pygame.font.Font(None, 24)

        # Colors
        self._bg_color = (2, 6, 23)
        self._star_color = (255, 255, 255)
        self._hull_color = (51, 65, 85)
        self._hull_border = (148, 163, 184)
        self._segment_on = (59, 130, 246)
        self._segment_off = (15, 23, 42)
        self._dome_color = (96, 165, 250)
        self._gem_positive = (16, 185, 129)
        self._gem_negative = (239, 68, 68)
        self._obstacle_color = (120, 113, 108)
        self._obstacle_border = (68, 64, 60)
        self._text_color = (226, 232, 240)
        self._accent_color = (217, 70, 239)
        self._error_color = (248, 113, 113)
        self._panel_color = (15, 23, 42)

    def attach(self, surface: Optional["pygame.Surface"]) -> None:
        self._screen = surface

    def has_surface(self) -> bool:
        return self._screen is not None

    def render(self, snapshot: GameSnapshot) -> None:
        if self._screen is None:
            return
        self.render_to_surface(self._screen, snapshot)
        pygame.display.flip()

    def render_to_surface(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        surface.fill(self._bg_color)
        self._draw_stars(surface, snapshot)
        self._draw_shockwaves(surface, snapshot)
        self._draw_ship(surface, snapshot)
        self._draw_obstacles(surface, snapshot)
        self._draw_gems(surface, snapshot)
        if snapshot.flash_active:
            self._draw_flash(surface)
        self._draw_hud(surface, snapshot)
        self._draw_overlay(surface, snapshot)

    def _draw_stars(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        for x, y, size in zip(
            snapshot.star_x.tolist(), snapshot.star_y.tolist(), snapshot.star_size.tolist()
        ):
            pygame.draw.rect(surface, self._star_color, (int(x), int(y), max(1, int(size)), max(1, int(size))))

    def _alpha_layer(self, surface: "pygame.Surface") -> "pygame.Surface":
        """Transparent full-window layer, reused while the window size holds."""
        size = surface.get_size()
        if self._layer is None or self._layer.get_size() != size:
            self._layer = pygame.Surface(size, pygame.SRCALPHA)
        self._layer.fill((0, 0, 0, 0))
        return self._layer

    def _draw_shockwaves(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        waves = [wave for wave in snapshot.shockwaves if wave[2] >= 1]
        if not waves:
            return
        layer = self._alpha_layer(surface)
        for x, y, radius, alpha in waves:
            pygame.draw.circle(layer, (217, 70, 239, int(204 * alpha)), (int(x), int(y)), int(radius), 6)
            pygame.draw.circle(layer, (34, 211, 238, int(153 * alpha)), (int(x), int(y)), int(radius * 0.85), 3)
        surface.blit(layer, (0, 0))

    def _pie_points(self, cx: float, cy: float, radius: float, start: float, end: float) -> List[Tuple[float, float]]:
        points = [(cx, cy)]
        steps = max(2, int((end - start) / (math.pi / 24)))
        for i in range(steps + 1):
            angle = start + (end - start) * i / steps
            points.append((cx + math.cos(angle) * radius, cy + math.sin(angle) * radius))
        return points

    def _draw_ship(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        radius = snapshot.ship_radius
        segments = len(snapshot.segment_fill)
        d = snapshot.denominator

        for s, lit in enumerate(snapshot.segment_fill):
            cx = snapshot.ship_x + (s - (segments - 1) / 2) * (radius * 2.5)
            cy = snapshot.ship_y
            pygame.draw.circle(surface, self._hull_color, (int(cx), int(cy)), int(radius))
            for i in range(d):
                start = i * 2 * math.pi / d
                end = (i + 1) * 2 * math.pi / d
                color = self._segment_on if i < lit else self._segment_off
                points = self._pie_points(cx, cy, radius, start, end)
                pygame.draw.polygon(surface, color, points)
                pygame.draw.polygon(surface, self._hull_color, points, 2)
            pygame.draw.circle(surface, self._hull_border, (int(cx), int(cy)), int(radius), 2)
            pygame.draw.circle(surface, self._dome_color, (int(cx), int(cy)), int(radius * 0.4))

    def _draw_obstacles(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        for x, y, radius, rotation in zip(
            snapshot.obstacle_x.tolist(), snapshot.obstacle_y.tolist(),
            snapshot.obstacle_radius.tolist(), snapshot.obstacle_rotation.tolist()
        ):
            points = []
            for i in range(8):
                angle = rotation + i * math.pi / 4
                r = radius * (0.8 + math.sin(i * 1234.5) * 0.2)
                points.append((x + math.cos(angle) * r, y + math.sin(angle) * r))
            pygame.draw.polygon(surface, self._obstacle_color, points)
            pygame.draw.polygon(surface, self._obstacle_border, points, 2)

    def _draw_gems(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        for x, y, radius, numerator in zip(
            snapshot.gem_x.tolist(), snapshot.gem_y.tolist(),
            snapshot.gem_radius.tolist(), snapshot.gem_numerator.tolist()
        ):
            color = self._gem_positive if numerator > 0 else self._gem_negative
            points = [
                (x + math.cos(i * math.pi / 3) * radius, y + math.sin(i * math.pi / 3) * radius)
                for i in range(6)
            ]
            pygame.draw.polygon(surface, self._panel_color, points)
            pygame.draw.polygon(surface, color, points, 3)
            sign = "+" if numerator > 0 else ""
            label = self._font_small.render(f"{sign}{numerator}/{snapshot.denominator}", True, color)
            surface.blit(label, label.get_rect(center=(int(x), int(y))))

    def _draw_flash(self, surface: "pygame.Surface") -> None:
        layer = self._alpha_layer(surface)
        layer.fill((239, 68, 68, 77))
        surface.blit(layer, (0, 0))

    def _draw_hud(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        width = surface.get_width()
        level = self._font.render(f"Level {snapshot.level_id}/{snapshot.num_levels}", True, self._text_color)
        surface.blit(level, (20, 20))

        if snapshot.power_ups > 0:
            pulsar = self._font_small.render(
                f"PULSAR x{snapshot.power_ups} [SPACE]", True, self._accent_color
            )
            surface.blit(pulsar, (20, 56))

        target = self._font.render(f"Target: {snapshot.target_text}", True, self._text_color)
        surface.blit(target, (width - target.get_width() - 20, 20))
        current = self._font.render(f"Current: {snapshot.current_text}", True, self._segment_on)
        surface.blit(current, (width - current.get_width() - 20, 56))

    def _panel(self, surface: "pygame.Surface", lines: List[Tuple[str, Tuple[int, int, int]]]) -> None:
        width, height = surface.get_size()
        panel_w, panel_h = min(640, width - 40), 60 + 44 * len(lines)
        rect = pygame.Rect((width - panel_w) // 2, (height - panel_h) // 2, panel_w, panel_h)

        dim = self._alpha_layer(surface)
        dim.fill((0, 0, 0, 160))
        surface.blit(dim, (0, 0))
        pygame.draw.rect(surface, self._panel_color, rect, border_radius=12)
        pygame.draw.rect(surface, self._segment_on, rect, 2, border_radius=12)

        y = rect.top + 30
        for text, color in lines:
            label = self._font.render(text, True, color)
            surface.blit(label, label.get_rect(midtop=(rect.centerx, y)))
            y += 44

    def _typed(self) -> str:
        return self._answer_text() if self._answer_text is not None else ""

    def _draw_overlay(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        state = snapshot.state_name
        overlay = snapshot.overlay
        text, accent, error = self._text_color, self._accent_color, self._error_color

        if state == "start":
            self._panel(surface, [
                ("Fraction Racer", accent),
                ("Collect gems to reach exactly the target.", text),
                ("Don't overcharge, and avoid the asteroids!", text),
                ("Press ENTER to start", accent),
            ])
        elif isinstance(overlay, MathOverlay):
            gems = "  ".join(f"{'+' if g > 0 else ''}{g}/{snapshot.denominator}" for g in overlay.history)
            sign = "+" if overlay.current_gem > 0 else "-"
            verified = ", ".join(f"{total}/{snapshot.denominator}" for total in overlay.partial_sums[:overlay.step])
            lines = [
                ("Verify the hyperdrive", accent),
                (gems, text),
                (f"{overlay.previous_sum}/{snapshot.denominator} {sign} "
                 f"{abs(overlay.current_gem)}/{snapshot.denominator} = ?/{snapshot.denominator}", text),
                (f"Verified: {verified}", text),
                (f"> {self._typed()}", error if overlay.input_error else text),
                (f"Step {overlay.step} of {overlay.total_steps}", text),
            ]
            self._panel(surface, lines)
        elif isinstance(overlay, ChargeOverlay):
            dots = " ".join("*" if i < overlay.progress else "o" for i in range(overlay.required))
            lines = [
                ("Charge Up", accent),
                (f"Answer {overlay.required} correctly to earn a Pulsar", text),
                (dots, accent),
                (f"{overlay.question_text} = ?/{snapshot.denominator}", text),
                (f"> {self._typed()}", error if overlay.input_error else text),
            ]
            self._panel(surface, lines)
        elif state == "level_complete":
            self._panel(surface, [
                ("Level Complete!", accent),
                ("Calculations verified.", text),
                ("ENTER: next level    C: charge up", text),
            ])
        elif state == "game_complete":
            self._panel(surface, [
                ("Victory!", accent),
                ("You have mastered the fractional sectors.", text),
                ("Press ENTER to play again", accent),
            ])
