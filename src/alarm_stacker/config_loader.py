import json
from os import path
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional, TypedDict, Union

import jsonschema
import yaml

from .generator import DEFAULT_MAX_WORKERS
from .models import Group, ResourceSelector, StaleAlarmPolicy, ThresholdOverride

# type declaration
ConfigElement = Union[str, int, float, bool, None, "ConfigList", "ConfigValue"]
ConfigList = List[ConfigElement]
ConfigValue = Dict[str, ConfigElement]

# constants
DEFAULT_CONFIG_FILES = [
    "alarm-stacker.yaml",
    "alarm-stacker.yml",
    "alarm-stacker.json",
]
DEFAULT_STALE_ALARMS = StaleAlarmPolicy.RETAIN.value


_override_keys = {
    "Threshold": "threshold",
    "ComparisonOperator": "comparison_operator",
    "Statistic": "statistic",
    "Period": "period",
    "EvaluationPeriods": "evaluation_periods",
}


class ConfigFile(TypedDict):
    """Config File

    Args:
        TypedDict (_type_): typed dict
    """

    FilePath: str
    Type: Literal["json", "yaml"]


def get_schema() -> dict:
    """Get config schema"""
    with open(Path(__file__).parent / "config_schema.json", "r") as f:
        schema = json.load(f)
        assert isinstance(schema, dict)
        return schema


def load(file_path: Optional[str]) -> ConfigValue:
    """Loads configuration from specified file path

    Args:
        file_path (str): file path, or None if use the default config

    Returns:
        ConfigValue: config dict, with group defaults merged into each group
    """
    config_file = _resolve_file_path(file_path)
    with open(config_file["FilePath"], "r") as f:
        if config_file["Type"] == "json":
            config = json.load(f)
        else:
            config = yaml.safe_load(f)
    jsonschema.validate(config, get_schema())

    return _merge_configs(config)


def load_groups(config: Mapping[str, Any]) -> list[Group]:
    """Converts loaded config into groups

    Selectors are not validated here, a malformed selector fails its own group
    when the group runs.

    Args:
        config (Mapping[str, Any]): loaded config

    Returns:
        list[Group]: groups in config order
    """
    groups = []
    for group_name, group_config in config["groups"].items():
        groups.append(
            Group(
                name=group_name,
                service_type=group_config["service_type"],
                selectors=tuple(_selector(s) for s in group_config["resources"]),
                alarm_actions=tuple(group_config.get("alarm_actions") or ()),
                alarm_name_suffix=group_config.get("alarm_name_suffix"),
            )
        )

    return groups


def stale_alarm_policy(config: Mapping[str, Any]) -> StaleAlarmPolicy:
    """Gets the stale alarm policy

    Args:
        config (Mapping[str, Any]): loaded config

    Returns:
        StaleAlarmPolicy: policy
    """
    return StaleAlarmPolicy(config["globals"]["stale_alarms"])


def _selector(selector_config: Mapping[str, Any]) -> ResourceSelector:
    overrides = {
        metric_name: _override(value) for metric_name, value in (selector_config.get("thresholds") or {}).items()
    }
    return ResourceSelector(
        name=selector_config.get("name"),
        pattern=selector_config.get("pattern"),
        overrides=overrides,
    )


def _override(value: Union[int, float, Mapping[str, Any]]) -> ThresholdOverride:
    if isinstance(value, Mapping):
        return ThresholdOverride(**{_override_keys[k]: v for k, v in value.items()})
    return ThresholdOverride(threshold=value)


def _config_file(config_file_path: str) -> ConfigFile:
    conf: ConfigFile = {
        "FilePath": config_file_path,
        "Type": "json",  # default
    }
    if config_file_path.endswith("yaml") or config_file_path.endswith("yml"):
        conf["Type"] = "yaml"

    return conf


def _resolve_file_path(file_path: Optional[str]) -> ConfigFile:
    if file_path:
        if path.exists(file_path):
            return _config_file(file_path)
        else:
            raise FileNotFoundError(file_path)
    else:
        for file_name in DEFAULT_CONFIG_FILES:
            if path.exists(file_name):
                return _config_file(file_name)

        raise ValueError("config file not found. locate `alarm-stacker.yaml` or specify `-c your-config.yaml`")


def _merge_configs(config: ConfigValue) -> ConfigValue:
    default_glo = default_global_config()
    glo = config.get("globals")
    if glo:
        assert isinstance(glo, dict)
        glo = _merge_dicts(default_glo, glo)
    else:
        glo = default_glo

    merged = {}
    group_defaults = glo["group_defaults"]
    groups = config["groups"]
    for key in groups:  # type: ignore
        merged[key] = _merge_dicts(group_defaults, groups[key])  # type: ignore

    return dict(config, **{"globals": glo, "groups": merged})


def default_global_config() -> ConfigValue:
    """Gets default configuration of `globals` key

    Returns:
        ConfigValue: default global config dict
    """
    return {
        "group_defaults": {
            "alarm_actions": [],
        },
        "stale_alarms": DEFAULT_STALE_ALARMS,
        "max_workers": DEFAULT_MAX_WORKERS,
    }


def _merge_dicts(conf1: dict, conf2: dict) -> ConfigValue:
    ret = conf1.copy()
    for k, v2 in conf2.items():
        v1 = ret.get(k)
        if v1:
            if isinstance(v1, dict) and isinstance(v2, dict):
                ret[k] = _merge_dicts(v1, v2)
            elif isinstance(v1, list) and isinstance(v2, list):
                ret[k] = v1 + v2
            else:
                ret[k] = v2  # overwrite
        else:
            ret[k] = v2

    return ret
