import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Optional

from recordmapper.errors import SchemaApplyError, StatementError

logger = logging.getLogger("recordmapper.executor")


@dataclass
class TaskOutcome:
    label: Any
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self):
        return self.error is None


class TaskGroup:
    """Runs independent units of work in parallel and joins on all of them.

    ``run`` returns only after every task has finished; outcomes come back in
    submission order, each holding either the task's return value or the
    exception it raised.
    """

    def __init__(self, max_workers=None):
        self.max_workers = max_workers

    def run(self, tasks):
        tasks = list(tasks)
        if not tasks:
            return []
        workers = self.max_workers or len(tasks)
        outcomes = []
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [(label, pool.submit(fn)) for label, fn in tasks]
            for label, future in futures:
                try:
                    outcomes.append(TaskOutcome(label, value=future.result()))
                except Exception as e:
                    outcomes.append(TaskOutcome(label, error=e))
        return outcomes


@dataclass
class SchemaReport:
    executed: List[str] = field(default_factory=list)
    errors: FrozenSet[StatementError] = frozenset()

    @property
    def ok(self):
        return not self.errors

    def raise_for_errors(self):
        if self.errors:
            raise SchemaApplyError(self.errors)


class DDLExecutor:
    def __init__(self, engine, max_workers=None):
        self.engine = engine
        self.task_group = TaskGroup(max_workers)

    def _run_phase(self, statements):
        outcomes = self.task_group.run(
            (sql, lambda sql=sql: self.engine.execute(sql)) for sql in statements
        )
        executed, errors = [], set()
        for outcome in outcomes:
            if outcome.ok:
                executed.append(outcome.label)
            else:
                errors.add(StatementError(outcome.label, str(outcome.error)))
        return executed, errors

    def apply(self, plan):
        """Create tables and join tables, then add foreign keys once they all exist.

        A failing statement never stops the others; every failure is reported.
        """
        executed, errors = self._run_phase(plan.create_statements())
        altered, alter_errors = self._run_phase(plan.alter_statements())
        executed.extend(altered)
        errors |= alter_errors

        if errors:
            logger.warning("error count: %d", len(errors))
            for err in errors:
                logger.warning("%s", err)
        return SchemaReport(executed=executed, errors=frozenset(errors))
