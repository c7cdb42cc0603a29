"""
Wellness DAO Package

Core imports are lazily loaded so that importing a submodule does not pull
in the whole stack. For direct module access, import from submodules:

    from wellness_dao.governance import GovernanceController, VotingController
    from wellness_dao.treasury import Treasury
    from wellness_dao.ledger import WellnessToken
"""

# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name in ('deploy_dao', 'DAODeployment'):
        from . import deployment
        return getattr(deployment, name)
    elif name == 'load_config':
        from .config import load_config
        return load_config
    elif name == 'ExecResult':
        from .result import ExecResult
        return ExecResult
    elif name == 'WellnessDAOException':
        from .exceptions import WellnessDAOException
        return WellnessDAOException
    raise AttributeError(f"module 'wellness_dao' has no attribute {name!r}")

__all__ = ['deploy_dao', 'DAODeployment', 'load_config', 'ExecResult', 'WellnessDAOException']
