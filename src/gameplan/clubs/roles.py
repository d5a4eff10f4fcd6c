"""Role names and categories the authorization gates refer to."""

from __future__ import annotations

OWNER_ROLE = "President"

# Management
PRESIDENT = OWNER_ROLE
MANAGER = "Manager"
# Coaching staff
HEAD_COACH = "Head Coach"
ASSISTANT_COACH = "Assistant Coach"
# Players
CAPTAIN = "Captain"
PLAYER = "Player"

CATEGORY_MANAGEMENT = "management"
CATEGORY_COACHING_STAFF = "coaching_staff"
CATEGORY_PLAYERS = "players"
CATEGORY_MEDICAL = "medical"
