"""Release flow: failure policies, recovery and the step driver.

The driver lives in `shipit.release.driver` and is imported from there;
services depend on `shipit.release.errors`, so this package stays light.
"""

from shipit.release.errors import ReleaseAborted, ReleaseError
from shipit.release.recovery import FailurePolicy, RecoveryCoordinator, RecoveryPhase

__all__ = [
    "FailurePolicy",
    "RecoveryCoordinator",
    "RecoveryPhase",
    "ReleaseAborted",
    "ReleaseError",
]
