"""Recoverable lineup/game errors. None of these end a game session."""


class LineupError(ValueError):
    pass


class InsufficientPlayers(LineupError):
    def __init__(self, present: int, required: int):
        self.present = present
        self.required = required
        super().__init__(f"Need {required} present players, only {present} available")


class DuplicateJerseyNumber(LineupError):
    def __init__(self, jersey_number: int):
        self.jersey_number = jersey_number
        super().__init__(f"Jersey number {jersey_number} is already taken")


class InvalidLineup(LineupError):
    pass


class InvalidSwap(LineupError):
    pass


class NoPresentPlayers(LineupError):
    """Raised instead of dividing by a zero present-player count."""


class PeriodAlreadyCompleted(LineupError):
    pass


class UnknownPlayer(LineupError):
    pass


class UnknownPeriod(LineupError):
    pass
