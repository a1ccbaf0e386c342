from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Callable, ContextManager, Optional

from .analytics.calculator.standard_calculator import StandardEfficiencyCalculator
from .analytics.service import EfficiencyAggregator
from .common.datetime_utils import Clock, now_local
from .common.locks import KeyedLock
from .core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_STANDARD_LUNCH_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .qr.mysql_qr_repository import MySQLQRPointRepository
from .qr.repository import QRPointRepository
from .qr.service import QRPointRegistry
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.scan_policy import ScanPolicy
from .shifts.service import ShiftLedger
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import ProductionTaskView
from .worklogs.mysql_worklog_repository import MySQLWorkLogRepository
from .worklogs.repository import WorkLogRepository
from .worklogs.service import WorkSessionLedger


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    clock: Clock

    qr_repo: QRPointRepository
    shifts_repo: ShiftRepository
    tasks_repo: TaskRepository
    worklogs_repo: WorkLogRepository

    qr_registry: QRPointRegistry
    task_view: ProductionTaskView
    shift_ledger: ShiftLedger
    work_session_ledger: WorkSessionLedger
    efficiency_aggregator: EfficiencyAggregator


def assemble(
    *,
    qr_repo: QRPointRepository,
    shifts_repo: ShiftRepository,
    tasks_repo: TaskRepository,
    worklogs_repo: WorkLogRepository,
    conn: Optional[DatabaseConnection] = None,
    clock: Clock = now_local,
    transaction: Callable[[], ContextManager] = nullcontext,
    settings: Any = None,
) -> Container:
    """Wire services over the given repositories.

    The two ledgers share one per-actor lock table.
    """
    grace = int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES))
    lunch_minutes = int(getattr(settings, "STANDARD_LUNCH_MINUTES", DEFAULT_STANDARD_LUNCH_MINUTES))
    max_hours = getattr(settings, "EFFICIENCY_MAX_SESSION_HOURS", None)

    locks = KeyedLock()
    qr_registry = QRPointRegistry(qr_repo)
    task_view = ProductionTaskView(tasks_repo)
    shift_ledger = ShiftLedger(
        shifts_repo,
        qr_registry,
        policy=ScanPolicy(grace_minutes=grace),
        clock=clock,
        locks=locks,
        standard_lunch_minutes=lunch_minutes,
    )
    work_session_ledger = WorkSessionLedger(
        worklogs_repo,
        task_view,
        clock=clock,
        locks=locks,
        transaction=transaction,
    )
    efficiency_aggregator = EfficiencyAggregator(
        worklogs_repo,
        tasks_repo,
        calculator=StandardEfficiencyCalculator(max_session_hours=float(max_hours) if max_hours else None),
        clock=clock,
    )

    return Container(
        conn=conn,
        clock=clock,
        qr_repo=qr_repo,
        shifts_repo=shifts_repo,
        tasks_repo=tasks_repo,
        worklogs_repo=worklogs_repo,
        qr_registry=qr_registry,
        task_view=task_view,
        shift_ledger=shift_ledger,
        work_session_ledger=work_session_ledger,
        efficiency_aggregator=efficiency_aggregator,
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        qr_repo=MySQLQRPointRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        worklogs_repo=MySQLWorkLogRepository(conn),
        conn=conn,
        transaction=conn.transaction,
        settings=settings,
    )
