"""Typed domain exceptions for match rule violations.

Domain code raises subclasses of MatchError rather than raw ValueError,
so the event router can convert them into ErrorMessage responses at a
single boundary.
"""


class MatchError(Exception):
    """Base exception for match rule violations."""


class MatchNotConfiguredError(MatchError):
    """No match mode has been chosen yet; the mode-selection prompt must be answered first."""


class InvalidEntrantError(MatchError):
    """Entrant index is outside the current match.

    Attributes:
        index: The entrant index that was requested.
        count: The number of entrants in the current match.

    """

    def __init__(self, *, index: int, count: int) -> None:
        self.index = index
        self.count = count
        super().__init__(f"entrant {index} is outside the match (0-{count - 1})")


class InvalidRodError(MatchError):
    """Rod index is outside the rod set."""

    def __init__(self, *, rod: int, rods: int) -> None:
        self.rod = rod
        self.rods = rods
        super().__init__(f"rod {rod} is outside the rod set (0-{rods - 1})")


class EndGameNotRequestedError(MatchError):
    """The end of the match was confirmed without being requested first."""


class SharedBoardRequiredError(MatchError):
    """Win counters can only be edited while the shared board is shown."""
