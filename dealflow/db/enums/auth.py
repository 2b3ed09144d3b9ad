"""User role enums."""

from enum import Enum


class Role(str, Enum):
    CLIENT = "client"
    BROKER = "broker"
    TEAM_MEMBER = "team_member"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"
