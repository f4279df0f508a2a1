"""
Time management for MCTS in timed games.

Splits the remaining game clock evenly over the moves still expected and
turns each share into a deadline for one search. The engine checks the
deadline between iterations, so a simulation path is never cut short.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
import time


@dataclass
class TimeConfig:
    """Configuration for time-managed search."""

    # Total game time in seconds (None = unlimited)
    total_time: Optional[float] = None

    # Time management
    time_buffer: float = 2.0        # Reserve this much time at end of game
    move_overhead: float = 0.1      # Fixed overhead per move (tree setup, etc.)
    min_move_time: float = 0.01     # Never plan less than this per move

    # Estimated game length for initial time allocation
    estimated_moves: int = 40

    def __post_init__(self):
        if self.total_time is not None and self.total_time <= 0:
            raise ValueError(f"total_time must be positive, got {self.total_time}")
        if self.estimated_moves < 1:
            raise ValueError(f"estimated_moves must be >= 1, got {self.estimated_moves}")


@dataclass
class TimeManager:
    """
    Manages time allocation for MCTS in timed games.

    Tracks remaining time and converts it into per-move search deadlines.
    """

    config: TimeConfig = field(default_factory=TimeConfig)

    # Time tracking
    remaining_time: float = field(init=False)
    moves_played: int = 0
    estimated_moves_remaining: int = field(init=False)

    # Statistics for analysis
    total_simulations: int = 0
    total_time_used: float = 0.0
    move_count: int = 0

    def __post_init__(self):
        """Initialize time tracking."""
        if self.config.total_time is not None:
            self.remaining_time = max(0.0, self.config.total_time - self.config.time_buffer)
        else:
            self.remaining_time = float('inf')
        self.estimated_moves_remaining = self.config.estimated_moves

    @property
    def unlimited(self) -> bool:
        return self.config.total_time is None

    def get_time_per_move(self) -> Optional[float]:
        """
        Seconds available for the next move, or None without a time limit.
        """
        if self.unlimited:
            return None

        available = max(0.0, self.remaining_time - self.config.move_overhead)
        share = available / max(1, self.estimated_moves_remaining)
        return max(self.config.min_move_time, share)

    def move_deadline(self, start: Optional[float] = None) -> Optional[float]:
        """
        time.monotonic() instant at which the current search must stop.

        Args:
            start: Monotonic start time of the search (defaults to now)
        """
        budget = self.get_time_per_move()
        if budget is None:
            return None
        if start is None:
            start = time.monotonic()
        return start + budget

    def update(self, elapsed_time: float, simulations_run: int) -> None:
        """
        Update time manager after a move.

        Args:
            elapsed_time: Time spent on this move (seconds)
            simulations_run: Number of simulations actually run
        """
        self.remaining_time = max(0.0, self.remaining_time - elapsed_time)
        self.moves_played += 1
        self.estimated_moves_remaining = max(1, self.estimated_moves_remaining - 1)

        # Update statistics
        self.total_simulations += simulations_run
        self.total_time_used += elapsed_time
        self.move_count += 1

    def update_moves_estimate(self, new_estimate: int) -> None:
        """
        Update estimated moves remaining based on game progress.

        Can be called when we have better information about likely game length.
        """
        self.estimated_moves_remaining = max(1, new_estimate)

    @property
    def avg_sims_per_move(self) -> float:
        """Average simulations per move so far."""
        if self.move_count == 0:
            return 0.0
        return self.total_simulations / self.move_count

    @property
    def avg_time_per_move(self) -> float:
        """Average time per move so far (seconds)."""
        if self.move_count == 0:
            return 0.0
        return self.total_time_used / self.move_count

    def stats(self) -> dict:
        """Return statistics about time management."""
        return {
            'remaining_time': self.remaining_time,
            'moves_played': self.moves_played,
            'estimated_moves_remaining': self.estimated_moves_remaining,
            'total_simulations': self.total_simulations,
            'total_time_used': self.total_time_used,
            'avg_sims_per_move': self.avg_sims_per_move,
            'avg_time_per_move': self.avg_time_per_move,
        }


def create_time_manager(
    total_time: Optional[float] = None,
    estimated_moves: int = 40,
    time_buffer: float = 2.0,
) -> TimeManager:
    """
    Create a time manager with given settings.

    Args:
        total_time: Total game time in seconds, or None for unlimited
        estimated_moves: Expected number of moves we still have to play
        time_buffer: Seconds held back for the end of the game

    Returns:
        Configured TimeManager instance.
    """
    config = TimeConfig(
        total_time=total_time,
        estimated_moves=estimated_moves,
        time_buffer=time_buffer,
    )
    return TimeManager(config=config)
