"""Tools for the example workflows in this directory.

The workflows reference them as ``example_tools:<name>``; ``agentloop run``
puts this directory on the import path.
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from typing import Any

from agentloop.tools.base import tool


@tool
def roll_die(sides: int = 6) -> dict[str, int]:
    """Roll a die with the given number of sides (default 6)."""
    if sides < 2:
        raise ValueError("a die needs at least 2 sides")
    return {"sides": sides, "result": random.randint(1, sides)}


@tool(name="getWeather")
def get_weather(city: str) -> dict[str, str]:
    """Gets the current weather for a specified city, e.g. 'London' or 'Tokyo'."""
    return {"report": f"The weather in {city} is 22°C and sunny."}


@tool
def find_flights(destination: str, date: str) -> dict[str, str]:
    """Finds flight options for a destination city and a YYYY-MM-DD travel date."""
    return {"report": f"Found a round-trip flight to {destination} on {date} for $1200 on 'Galaxy Airlines'."}


@tool
def find_hotels(destination: str, date: str) -> dict[str, str]:
    """Finds hotel options for a destination city and a YYYY-MM-DD check-in date."""
    return {"report": f"Found a room at the 'Cosmic Inn' in {destination} starting {date} for $250/night."}


class NumberGuesser:
    """``check_guess``: compare a guess with a secret number between 1 and 100.

    The secret is drawn once per instance, so one process plays one game.
    """

    name = "check_guess"
    description = "Checks a guessed number against the secret number. The secret is between 1 and 100."

    def __init__(self, secret: int | None = None) -> None:
        self.secret = secret if secret is not None else random.randint(1, 100)

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"guess": {"type": "integer", "description": "The number to guess."}},
            "required": ["guess"],
        }

    async def execute(self, args: Mapping[str, Any]) -> dict[str, str]:
        if "guess" not in args:
            raise ValueError("missing 'guess' argument")
        guess = int(args["guess"])
        if guess < self.secret:
            return {"status": "too_low"}
        if guess > self.secret:
            return {"status": "too_high"}
        return {"status": "correct"}


check_guess = NumberGuesser()
