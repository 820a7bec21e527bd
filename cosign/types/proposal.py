"""Proposal payload tags."""

from enum import IntEnum

__all__ = ["ProposalPayloadType"]


class ProposalPayloadType(IntEnum):
    """8-bit tags distinguishing proposal messages."""

    CREATE = 0
    REJECT = 1
    APPROVE = 2
    INFO = 3
