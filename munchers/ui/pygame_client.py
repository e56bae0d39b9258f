"""Pygame visualisation and input for Munchers.

Renders engine snapshots (grid values, Muncher, Troggles, hint and
consumed cells) with an info panel on the right, and feeds keyboard input
and clock ticks back into the engine.  Ticks come from a Pygame timer
whose events carry the engine generation they were armed for, so a timer
left over from a previous game is ignored by the engine.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pygame

from munchers.enemies.profiles import EnemyKind
from munchers.game.state import GameMode
from munchers.levels.errors import LevelInitError
from munchers.rules.rule_engine import Rule

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from munchers.engine.session import GameEngine
    from munchers.game.state import GameState
    from munchers.world.cell import Position

logger = logging.getLogger(__name__)

# Colour palette
_BG = (15, 15, 40)
_CELL = (35, 35, 80)
_GRID_LINE = (70, 70, 130)
_REVEALED = (40, 110, 60)
_CONSUMED = (25, 25, 50)
_TEXT = (220, 220, 220)
_DIM_TEXT = (110, 110, 140)
_MUNCHER = (90, 220, 90)
_WIN = (120, 230, 120)
_LOSE = (240, 90, 90)

_TROGGLE_COLOURS: dict[EnemyKind, tuple[int, int, int]] = {
    EnemyKind.STANDARD: (230, 70, 70),
    EnemyKind.SPEED: (250, 160, 40),
    EnemyKind.SMART: (180, 90, 250),
    EnemyKind.BLOCKER: (120, 120, 120),
    EnemyKind.HUNTER: (250, 60, 160),
}

_ARROWS: dict[int, tuple[int, int]] = {
    pygame.K_UP: (-1, 0),
    pygame.K_DOWN: (1, 0),
    pygame.K_LEFT: (0, -1),
    pygame.K_RIGHT: (0, 1),
}
_LEVEL_KEYS = {getattr(pygame, f"K_{n}"): n for n in range(1, 10)}
_TICK_EVENT = pygame.USEREVENT + 1


def describe_rule(rule: Rule, target_number: int) -> str:
    """Player-facing text for the active rule."""
    match rule:
        case Rule.MULTIPLES:
            return f"Multiples of {target_number}"
        case Rule.FACTORS:
            return f"Factors of {target_number}"
        case Rule.PRIMES:
            return "Prime numbers"
        case Rule.ADDITION:
            return f"Sums equal to {target_number}"
        case Rule.SUBTRACTION:
            return f"Differences equal to {target_number}"
        case Rule.MIXED:
            return f"Expressions equal to {target_number}"
    return rule.value


def cycle_level(level_ids: Iterable[int], current: int, step: int) -> int:
    """Move the menu cursor ``step`` places through ``level_ids``, wrapping.

    An unknown ``current`` counts as the first level.
    """
    ordered = sorted(level_ids)
    if not ordered:
        return current
    index = ordered.index(current) if current in ordered else 0
    return ordered[(index + step) % len(ordered)]


class PygameClient:
    """Plays a GameEngine in a Pygame window.

    Attributes:
        engine: The engine being played.
        cell_size: Pixel size of each grid cell.
        screen: The Pygame display surface.
    """

    def __init__(self, engine: GameEngine, cell_size: int = 80) -> None:
        """Initialise the window.

        Args:
            engine: The engine to render and drive.
            cell_size: Pixel width/height per grid cell.
        """
        self.engine = engine
        self.cell_size = cell_size
        self._armed_generation = -1
        self._message = ""
        self._latest: GameState | None = engine.snapshot()
        self._selected_level = (
            engine.progression.recommended_level() if engine.progression is not None else 1
        )
        self._unsubscribe = engine.subscribe(self._on_state)

        rows, cols = self._board_extent()
        self._panel_width = 300
        self._win_w = cols * cell_size + self._panel_width
        self._win_h = max(rows * cell_size, 480)

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("Number Munchers")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.value_font = pygame.font.SysFont("monospace", max(12, cell_size // 4), bold=True)
        self.running = True

    def _board_extent(self) -> tuple[int, int]:
        """Largest grid the window must fit."""
        config = self.engine.config
        rows, cols = config.classic_rows, config.classic_cols
        if self.engine.catalog is not None:
            for level in self.engine.catalog.levels.values():
                rows = max(rows, level.parameters.rows)
                cols = max(cols, level.parameters.cols)
        return rows, cols

    def _on_state(self, state: GameState | None) -> None:
        self._latest = state
        if state is not None and state.is_terminal and self.engine.pending_high_score:
            rank = self.engine.submit_high_score("Player")
            if rank >= 0:
                self._message = f"New high score! Rank {rank + 1}"

    def run(self, fps: int = 30) -> None:
        """Main loop: handle events, keep the tick timer armed, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            self.clock.tick(fps)
            self._arm_timer()
            self._handle_events()
            self._draw()

        self._unsubscribe()
        pygame.quit()

    def _arm_timer(self) -> None:
        """Restart the tick timer whenever a new game begins."""
        generation = self.engine.generation
        if generation == self._armed_generation:
            return
        millis = max(1, int(self.engine.config.tick_seconds * 1000))
        pygame.time.set_timer(pygame.event.Event(_TICK_EVENT, generation=generation), millis)
        self._armed_generation = generation

    def _handle_events(self) -> None:
        """Process Pygame input and timer events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == _TICK_EVENT:
                self.engine.tick(event.generation)
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)

    def _handle_key(self, key: int) -> None:
        state = self.engine.state
        if key == pygame.K_ESCAPE:
            self.running = False
        elif state is None and key in (pygame.K_UP, pygame.K_DOWN):
            if self.engine.catalog is not None:
                step = -1 if key == pygame.K_UP else 1
                self._selected_level = cycle_level(
                    self.engine.catalog.levels, self._selected_level, step
                )
        elif state is None and key == pygame.K_RETURN and self.engine.catalog is not None:
            level_id = self._selected_level
            self._try(lambda: self.engine.start_level(level_id))
        elif key in _ARROWS:
            self.engine.move(*_ARROWS[key])
        elif key == pygame.K_SPACE:
            self.engine.eat()
        elif key == pygame.K_r and state is not None:
            self._try(self.engine.retry)
        elif key == pygame.K_n and state is not None and state.game_won:
            self.engine.next_puzzle()
        elif key == pygame.K_c:
            self._try(self.engine.start_classic)
        elif key == pygame.K_m:
            self.engine.return_to_menu()
        elif key in _LEVEL_KEYS and self.engine.catalog is not None:
            level_id = _LEVEL_KEYS[key]
            self._selected_level = level_id
            self._try(lambda: self.engine.start_level(level_id))

    def _try(self, action: Callable[[], object]) -> None:
        self._message = ""
        try:
            action()
        except LevelInitError as exc:
            logger.warning("Cannot start: %s", exc)
            self._message = str(exc)

    # -- Drawing --

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        state = self._latest
        if state is not None:
            self._draw_grid(state)
            self._draw_occupants(state)
        self._draw_info_panel(state)
        pygame.display.flip()

    def _draw_grid(self, state: GameState) -> None:
        """Draw cells and their values."""
        cs = self.cell_size
        for pos in state.grid.positions():
            cell = state.grid.cell_at(pos)
            rect = (pos.col * cs, pos.row * cs, cs, cs)
            if cell.consumed_correctly:
                colour = _CONSUMED
            elif cell.revealed:
                colour = _REVEALED
            else:
                colour = _CELL
            pygame.draw.rect(self.screen, colour, rect)
            pygame.draw.rect(self.screen, _GRID_LINE, rect, 1)
            if cell.consumed_correctly:
                continue
            text = self.value_font.render(str(cell.value), True, _TEXT)
            self.screen.blit(
                text,
                text.get_rect(center=(pos.col * cs + cs // 2, pos.row * cs + cs // 2)),
            )

    def _draw_occupants(self, state: GameState) -> None:
        """Draw the Muncher and Troggles as coloured rings."""
        cs = self.cell_size
        radius = max(4, cs // 2 - 4)
        pygame.draw.circle(self.screen, _MUNCHER, self._centre(state.muncher), radius, 4)
        for troggle in state.troggles:
            colour = _TROGGLE_COLOURS.get(troggle.kind, _LOSE)
            pygame.draw.circle(self.screen, colour, self._centre(troggle.position), radius - 6, 4)

    def _centre(self, pos: Position) -> tuple[int, int]:
        cs = self.cell_size
        return pos.col * cs + cs // 2, pos.row * cs + cs // 2

    def _draw_info_panel(self, state: GameState | None) -> None:
        """Draw a stats panel on the right side of the window."""
        panel_x = self._win_w - self._panel_width + 10
        y = 10
        colours: dict[int, tuple[int, int, int]] = {}

        if state is None:
            lines = ["NUMBER MUNCHERS", "", "C: classic game", "1-9: start level"]
            catalog = self.engine.catalog
            if catalog is not None:
                level = catalog.get(self._selected_level)
                name = level.name if level is not None else "?"
                lines += [
                    "Up/Down: choose level",
                    f"ENTER: level {self._selected_level} ({name})",
                ]
        else:
            title = (
                f"Level {state.level.id}: {state.level.name}"
                if state.level is not None
                else f"Classic, puzzle {state.puzzles_cleared + 1}"
            )
            lines = [
                title,
                describe_rule(state.rule, state.target_number),
                "",
                f"Score: {state.score}",
                f"Time: {state.time_left}",
                f"Mistakes: {state.mistakes}/{state.max_mistakes}",
                f"Streak: {state.streak}",
                f"Accuracy: {state.accuracy}%",
                f"Targets left: {state.remaining_targets()}",
            ]
            if state.objectives:
                lines += ["", "--- Objectives ---"]
                for objective in state.objectives:
                    done = objective.id in state.completed_objectives
                    lines.append(f"[{'x' if done else ' '}] {objective.description or objective.id}")
            if state.game_won:
                colours[len(lines) + 1] = _WIN
                lines += ["", "PUZZLE CLEARED!"]
                summary = self.engine.last_summary
                if summary is not None and state.mode is GameMode.LEVEL:
                    lines += [f"Final: {summary.final_score}", f"Stars: {summary.stars_earned}"]
                elif state.mode is GameMode.CLASSIC:
                    lines.append("N: next puzzle")
            elif state.game_over:
                colours[len(lines) + 1] = _LOSE
                lines += ["", "GAME OVER"]
            for achievement in self.engine.new_achievements:
                lines.append(f"* {achievement.name}")

        if self._message:
            lines += ["", self._message]
        lines += [
            "",
            "--- Controls ---",
            "Arrows: move",
            "SPACE: munch",
            "R: retry  M: menu",
            "ESC: quit",
        ]

        for index, line in enumerate(lines):
            colour = colours.get(index, _TEXT if line else _DIM_TEXT)
            surf = self.font.render(line, True, colour)
            self.screen.blit(surf, (panel_x, y))
            y += 18
