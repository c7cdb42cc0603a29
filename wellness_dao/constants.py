"""
Wellness DAO Constants

This module consolidates the protocol constants of the governance stack and
the environment configuration used by the logging system. Constants are
organized by category for easy reference and maintenance.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE PROTOCOL VALUES BELOW ARE THE DEPLOYMENT DEFAULTS. A RUNNING DAO
# CHANGES ITS VOTING PARAMETERS ONLY THROUGH THE OWNER SETTERS OR EXECUTED
# PARAMETER PROPOSALS, NEVER BY EDITING THIS FILE.

# ==================================================================================
# PRINCIPALS
# ==================================================================================
# Reserved burn address, rejected as owner, contract pointer or recipient
NULL_PRINCIPAL = 'SP000000000000000000002Q6VF78'

DEFAULT_DAO_OWNER = 'ST1OWNER'
DEFAULT_TOKEN_CONTRACT = 'SP000000000000000000002Q6VF78.wellness-token'
DEFAULT_GOVERNANCE_CONTRACT = 'ST1OWNER.governance'
DEFAULT_VOTING_CONTRACT = 'ST1OWNER.voting'
DEFAULT_TREASURY_CONTRACT = 'ST1OWNER.treasury'


# ==================================================================================
# GOVERNANCE PARAMETERS
# ==================================================================================
DEFAULT_VOTING_THRESHOLD = 51
DEFAULT_QUORUM_PERCENTAGE = 20
DEFAULT_PROPOSAL_DURATION = 1440  # blocks (~10 days at 10 minute blocks)
DEFAULT_REWARD_RATE = 5  # percent of yes-weight minted to the proposer

VOTING_THRESHOLD_MIN = 51
VOTING_THRESHOLD_MAX = 100
QUORUM_PERCENTAGE_MIN = 1
QUORUM_PERCENTAGE_MAX = 100
REWARD_RATE_MIN = 1
REWARD_RATE_MAX = 10

GOVERNANCE_MAX_PROPOSALS = 100
VOTING_MAX_PROPOSALS = 500

# Ledger balance a principal must hold to open a proposal
MIN_PROPOSAL_BALANCE = 100

DESCRIPTION_MIN_LENGTH = 1
DESCRIPTION_MAX_LENGTH = 256


# ==================================================================================
# TREASURY PARAMETERS
# ==================================================================================
TREASURY_LOCK_PERIOD = 1440  # blocks a contribution stays locked


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in LOGGER_DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
