"""Restore-point strategies keyed by milestone classification."""

from typing import Union

from .schema import BackupType, Classification, RestorePointStrategy


RESTORE_STRATEGIES = {
    Classification.CRITICAL: RestorePointStrategy(
        pre_mission=True,
        post_mission=True,
        backup_type=BackupType.FULL,
        backups=2,
        description="Full backup before and after mission (critical milestone)",
    ),
    Classification.MAJOR: RestorePointStrategy(
        pre_mission=True,
        post_mission=True,
        backup_type=BackupType.FULL,
        backups=2,
        description="Full backup before and after mission (major milestone)",
    ),
    Classification.MODERATE: RestorePointStrategy(
        pre_mission=False,
        post_mission=True,
        backup_type=BackupType.INCREMENTAL,
        backups=1,
        description="Incremental backup after mission",
    ),
    Classification.MINOR: RestorePointStrategy(
        pre_mission=False,
        post_mission=False,
        backup_type=BackupType.NONE,
        backups=0,
        description="No backup needed (minor change)",
    ),
    Classification.TRIVIAL: RestorePointStrategy(
        pre_mission=False,
        post_mission=False,
        backup_type=BackupType.NONE,
        backups=0,
        description="No backup needed (trivial change)",
    ),
}


def select_restore_strategy(classification: Union[Classification, str]) -> RestorePointStrategy:
    """Look up the restore strategy for a classification.

    Unrecognized classifications get the MODERATE strategy.
    """
    try:
        key = Classification(classification)
    except ValueError:
        key = Classification.MODERATE
    return RESTORE_STRATEGIES[key]
