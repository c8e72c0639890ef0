import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from .alarm_builder import build, collect
from .catalogs import get_catalog
from .deployment import Decision, Deployer, Skip, decide
from .errors import AlarmStackerError, GenerationCancelled
from .inventory import Inventory
from .models import AlarmDefinition, Group, ResourceDescriptor, RunMode, StaleAlarmPolicy
from .selector import candidate_names, match, validate_selectors
from .template import merge, new_template
from .thresholds import resolve

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


class GroupStatus(Enum):
    """Outcome of one group"""

    DEPLOYED = "deployed"
    UNCHANGED = "unchanged"
    NO_ALARMS = "no_alarms"
    PREVIEWED = "previewed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class GroupResult:
    """Result of one group"""

    group_name: str
    stack_name: str
    status: GroupStatus
    alarm_count: int = 0
    decision: Optional[Decision] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class RunReport:
    """Results of all groups of a run"""

    results: tuple[GroupResult, ...]

    @property
    def succeeded(self) -> bool:
        """Tests if every group completed

        Returns:
            bool: False if any group failed or was cancelled
        """
        return all(r.status not in (GroupStatus.FAILED, GroupStatus.CANCELLED) for r in self.results)

    def result_of(self, group_name: str) -> GroupResult:
        """Gets the result of a group

        Args:
            group_name (str): group name

        Returns:
            GroupResult: result
        """
        return next(r for r in self.results if r.group_name == group_name)


class AlarmGenerator:
    """Generates and deploys the alarm stacks of groups"""

    def __init__(
        self,
        inventory: Inventory,
        deployer: Deployer,
        stale_policy: StaleAlarmPolicy = StaleAlarmPolicy.RETAIN,
        max_workers: int = DEFAULT_MAX_WORKERS,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """Constructor

        Args:
            inventory (Inventory): resource inventory
            deployer (Deployer): stack deployer
            stale_policy (StaleAlarmPolicy): policy for generated alarms no longer regenerated
            max_workers (int): concurrent describe calls, and concurrent groups
            cancel_event (Optional[threading.Event]): set it to cancel the run
        """
        self.inventory = inventory
        self.deployer = deployer
        self.stale_policy = stale_policy
        self.max_workers = max(1, max_workers)
        self.cancel_event = cancel_event or threading.Event()

    def generate(self, groups: Sequence[Group], run_mode: RunMode) -> RunReport:
        """Runs every group

        A failing group never stops the others.

        Args:
            groups (Sequence[Group]): groups
            run_mode (RunMode): GENERATE deploys, PREVIEW never changes a stack

        Returns:
            RunReport: results in group order
        """
        if not groups:
            return RunReport(results=())

        group_workers = min(len(groups), self.max_workers)
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="describe") as describe_pool:
            with ThreadPoolExecutor(max_workers=group_workers, thread_name_prefix="group") as group_pool:
                futures = [group_pool.submit(self._run_group, g, run_mode, describe_pool) for g in groups]
                results = tuple(f.result() for f in futures)

        return RunReport(results=results)

    def _run_group(self, group: Group, run_mode: RunMode, describe_pool: Executor) -> GroupResult:
        try:
            return self._generate_group(group, run_mode, describe_pool)
        except GenerationCancelled as e:
            logger.warning("group %s cancelled: %s", group.name, e)
            return GroupResult(group.name, group.stack_name, GroupStatus.CANCELLED, error=str(e))
        except (AlarmStackerError, BotoCoreError, ClientError) as e:
            logger.error("group %s failed: %s", group.name, e)
            return GroupResult(group.name, group.stack_name, GroupStatus.FAILED, error=str(e))
        except Exception as e:
            logger.exception("group %s failed unexpectedly", group.name)
            return GroupResult(group.name, group.stack_name, GroupStatus.FAILED, error=f"{type(e).__name__}: {e}")

    def _generate_group(self, group: Group, run_mode: RunMode, describe_pool: Executor) -> GroupResult:
        validate_selectors(group.selectors)
        catalog = get_catalog(group.service_type)

        resources = self._discover(group, describe_pool)
        alarms: list[AlarmDefinition] = []
        for target in match(group.selectors, resources):
            for resource, metrics in resolve(target, catalog):
                alarms.extend(build(resource, metrics, catalog, group))
        alarms = collect(alarms)

        if not alarms:
            decision = decide(new_template(group.stack_name, []), None)
            logger.info("group %s: no alarms generated, nothing to deploy", group.name)
            return GroupResult(group.name, group.stack_name, GroupStatus.NO_ALARMS, decision=decision)

        self._check_cancelled(group)
        existing = self.deployer.current_template(group.stack_name)
        candidate = merge(existing, alarms, group.stack_name, self.stale_policy)
        decision = decide(candidate, existing)

        if isinstance(decision, Skip):
            logger.info("group %s: %s", group.name, decision.reason)
            return GroupResult(group.name, group.stack_name, GroupStatus.UNCHANGED, len(alarms), decision)

        self._check_cancelled(group)
        if run_mode is RunMode.PREVIEW:
            self.deployer.deploy(group.stack_name, decision.template_body, dry_run=True)
            status = GroupStatus.PREVIEWED
        else:
            self.deployer.deploy(group.stack_name, decision.template_body, dry_run=False)
            status = GroupStatus.DEPLOYED

        logger.info("group %s: %s with %d alarms", group.name, status.value, len(alarms))
        return GroupResult(group.name, group.stack_name, status, len(alarms), decision)

    def _discover(self, group: Group, describe_pool: Executor) -> list[ResourceDescriptor]:
        self._check_cancelled(group)
        names = candidate_names(group.selectors, self.inventory.list(group.service_type))
        futures = [describe_pool.submit(self._describe, group, name) for name in names]
        # resources deleted since listing describe as None
        described = [f.result() for f in futures]
        return [r for r in described if r is not None]

    def _describe(self, group: Group, name: str) -> Optional[ResourceDescriptor]:
        self._check_cancelled(group)
        return self.inventory.describe(group.service_type, name)

    def _check_cancelled(self, group: Group) -> None:
        if self.cancel_event.is_set():
            raise GenerationCancelled(f"run cancelled before group {group.name} completed")
