"""
teams/models.py -- Domain dataclass for teams.

Pure data container with zero logic. Membership is not stored here: a user
belongs to a team through User.team_id (see auth/models.py), and the route
layer joins the two.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Team:
    """A named group of users, managed by admins.

    id is None before the record is written to the database.
    """

    name: str
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
