import logging
from dataclasses import dataclass
from typing import Optional

from . import config_loader
from .deployment import CloudFormationDeployer
from .generator import AlarmGenerator, GroupResult, RunReport
from .inventory import AwsInventory
from .models import RunMode, StaleAlarmPolicy

logger = logging.getLogger(__name__)


@dataclass
class CommandOpts:
    """Command Options"""

    config_file: Optional[str]
    preview: bool
    delete_stale_alarms: bool
    max_workers: Optional[int]


def main(opts: CommandOpts) -> RunReport:
    """The main function

    Args:
        opts (CommandOpts): command options

    Returns:
        RunReport: results of all groups
    """
    config = config_loader.load(opts.config_file)
    groups = config_loader.load_groups(config)

    stale_policy = config_loader.stale_alarm_policy(config)
    if opts.delete_stale_alarms:
        stale_policy = StaleAlarmPolicy.DELETE
    max_workers = opts.max_workers or config["globals"]["max_workers"]  # type: ignore
    run_mode = RunMode.PREVIEW if opts.preview else RunMode.GENERATE

    generator = AlarmGenerator(
        AwsInventory(),
        CloudFormationDeployer(),
        stale_policy=stale_policy,
        max_workers=max_workers,  # type: ignore
    )
    logger.debug("run mode:%s, stale alarm policy:%s, max workers:%s", run_mode, stale_policy, max_workers)
    report = generator.generate(groups, run_mode)

    for result in report.results:
        _print(_result_line(result))
    if not report.succeeded:
        _print("some groups did not complete")

    return report


def _result_line(result: GroupResult) -> str:
    line = f"{result.status.value:<10} {result.stack_name} ({result.alarm_count} alarms)"
    if result.error:
        line += f": {result.error}"
    return line


def _print(text: str) -> None:
    print(text)  # noqa: T201
