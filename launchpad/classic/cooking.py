"""Egg cooking-time lookup used by the native (classic) UI."""

METHODS = ("Boiled", "Poached", "Fried", "Baked")
DONENESS = ("Soft", "Medium", "Hard")
SIZES = ("S", "M", "L", "XL")
TEMPERATURES = ("Fridge", "Room")

# seconds
BASE_TIME = {
    "Boiled": {"Soft": 240, "Medium": 360, "Hard": 600},
    "Poached": {"Soft": 180, "Medium": 180, "Hard": 180},
    "Fried": {"Soft": 120, "Medium": 180, "Hard": 240},
    "Baked": {"Soft": 900, "Medium": 900, "Hard": 900},
}
DEFAULT_BASE_TIME = 360

SIZE_MULTIPLIER = {"S": 0.9, "M": 1.0, "L": 1.1, "XL": 1.2}
TEMPERATURE_ADJUSTMENT = {"Fridge": 30, "Room": 0}


def calculate_cooking_time(method: str = "Boiled", doneness: str = "Soft", size: str = "M", temperature: str = "Room") -> int:
    if size not in SIZE_MULTIPLIER:
        raise ValueError(f"Unknown egg size: {size!r}")
    if temperature not in TEMPERATURE_ADJUSTMENT:
        raise ValueError(f"Unknown egg temperature: {temperature!r}")
    base = BASE_TIME.get(method, {}).get(doneness, DEFAULT_BASE_TIME)
    t = base * SIZE_MULTIPLIER[size] + TEMPERATURE_ADJUSTMENT[temperature]
    return max(0, int(t))
