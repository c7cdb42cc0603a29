"""
Error codes of the proposal controllers.

Codes are stable identifiers: Governance uses the 1xx range, Voting the 2xx
range. Both enums share member names for the lifecycle failures so the
shared proposal code can raise with whichever controller's codes it runs
under.
"""

from enum import IntEnum

from ..exceptions import WellnessDAOException


class GovernanceErrorCode(IntEnum):
    NOT_AUTHORIZED = 100
    INVALID_VOTING_THRESHOLD = 101
    INVALID_QUORUM = 102
    INVALID_PROPOSAL_DURATION = 103
    INVALID_UPGRADE_PROPOSAL = 104
    INVALID_DESCRIPTION = 105
    ALREADY_PAUSED = 106
    NOT_PAUSED = 107
    INVALID_PARAM = 108
    PROPOSAL_ACTIVE = 109
    PROPOSAL_NOT_FOUND = 110
    INSUFFICIENT_BALANCE = 111
    ALREADY_VOTED = 112
    VOTING_ENDED = 113
    VOTING_NOT_STARTED = 114
    INVALID_PRINCIPAL = 115
    MAX_PROPOSALS_EXCEEDED = 116
    QUORUM_NOT_MET = 117
    THRESHOLD_NOT_MET = 118
    ALREADY_EXECUTED = 119
    INVALID_REWARD_RATE = 120


class VotingErrorCode(IntEnum):
    NOT_AUTHORIZED = 200
    THRESHOLD_NOT_MET = 201
    INVALID_PRINCIPAL = 202
    PROPOSAL_NOT_FOUND = 203
    VOTING_ENDED = 204
    VOTING_NOT_STARTED = 205
    ALREADY_VOTED = 206
    INSUFFICIENT_BALANCE = 207
    INVALID_DESCRIPTION = 208
    INVALID_BUDGET = 209
    INVALID_DURATION = 210
    PROPOSAL_ACTIVE = 211
    QUORUM_NOT_MET = 212
    MAX_PROPOSALS_EXCEEDED = 213
    ALREADY_EXECUTED = 215


class GovernanceError(WellnessDAOException):
    """Failure raised by the Governance controller (1xx)."""


class VotingError(WellnessDAOException):
    """Failure raised by the Voting controller (2xx)."""
