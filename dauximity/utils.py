"""
Utility functions for ID, name and timestamp generation
"""
import random
import secrets
import string
import time


def now_ms() -> int:
    """Current wall-clock time in milliseconds"""
    return int(time.time() * 1000)


def generate_participant_id(length: int = 12) -> str:
    """Generate an unguessable per-connection participant ID"""
    alphabet = string.ascii_lowercase + string.digits
    return "peer_" + "".join(secrets.choice(alphabet) for _ in range(length))


def generate_room_id() -> str:
    """Generate a room ID from the clock plus a random hex suffix"""
    stamp = str(now_ms())[-6:]
    return f"room-{stamp}-{secrets.token_hex(2)}"


def generate_message_id(prefix: str) -> str:
    return f"{prefix}-{now_ms()}-{secrets.token_hex(3)}"


def generate_room_name() -> str:
    """Generate a placeholder name for rooms created without one"""
    adjectives = [
        "Pirate", "Static", "Midnight", "Analog", "Phantom", "Neon",
        "Retro", "Orbital", "Lost", "Hidden", "Distant", "Broken",
    ]
    nouns = [
        "Signal", "Frequency", "Channel", "Carrier", "Transmission",
        "Wave", "Band", "Beacon", "Relay", "Station",
    ]
    return f"{random.choice(adjectives)} {random.choice(nouns)} {random.randint(1, 99)}"
