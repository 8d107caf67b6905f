"""Membership capability checks."""

from chat_relay.application.membership.authority import MembershipAuthority

__all__ = ["MembershipAuthority"]
