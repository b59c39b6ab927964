#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings for ec2-describe-tags.

Environment variables provide the defaults and command-line flags override
them. Flags keep the single-dash long form (``-instance_id``) and also accept
``--instance_id``.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

DEFAULT_PAIR_DELIM = "\n"
DEFAULT_KV_DELIM = "="
DEFAULT_IMDS_TIMEOUT = 2.0

# flag dest -> environment variable
ENV_DEFAULTS = {
    "access_key": "AWS_ACCESS_KEY_ID",
    "secret_access_key": "AWS_SECRET_ACCESS_KEY",
    "session_token": "AWS_SESSION_TOKEN",
    "profile": "AWS_PROFILE",
    "region": "AWS_REGION",
    "instance_id": "EC2_INSTANCE_ID",
}

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


@dataclass(frozen=True)
class Settings:
    access_key: str = ""
    secret_access_key: str = ""
    session_token: str = ""
    profile: str = ""
    region: str = ""
    instance_id: str = ""
    pair_delim: str = DEFAULT_PAIR_DELIM
    kv_delim: str = DEFAULT_KV_DELIM
    query_meta: bool = False
    imds_timeout: float = DEFAULT_IMDS_TIMEOUT
    verbose: bool = False


def str_to_bool(value: str) -> bool:
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {value!r}")


def positive_float(value: str) -> float:
    try:
        f = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}")
    if f <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0: {value!r}")
    return f


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ec2-describe-tags",
        description="Print the tags of an EC2 instance as delimiter-separated key/value pairs",
        allow_abbrev=False,
    )
    # None means "not given" so the environment default can apply
    parser.add_argument("-access_key", "--access_key", default=None, help="AWS Access Key (env: AWS_ACCESS_KEY_ID)")
    parser.add_argument("-secret_access_key", "--secret_access_key", default=None,
                        help="AWS Secret Access Key (env: AWS_SECRET_ACCESS_KEY)")
    parser.add_argument("-session_token", "--session_token", default=None,
                        help="AWS session token for temporary credentials (env: AWS_SESSION_TOKEN)")
    parser.add_argument("-profile", "--profile", default=None, help="AWS profile name (env: AWS_PROFILE)")
    parser.add_argument("-region", "--region", default=None, help="AWS Region identifier (env: AWS_REGION)")
    parser.add_argument("-instance_id", "--instance_id", default=None, help="EC2 instance id (env: EC2_INSTANCE_ID)")
    parser.add_argument("-p_delim", "--p_delim", dest="pair_delim", default=DEFAULT_PAIR_DELIM,
                        help="delimiter between key-value pairs (default: newline)")
    parser.add_argument("-kv_delim", "--kv_delim", default=DEFAULT_KV_DELIM,
                        help="delimiter between key and value (default: '=')")
    parser.add_argument("-query_meta", "--query_meta", nargs="?", const=True, default=False, type=str_to_bool,
                        help="query metadata service for instance_id and region")
    parser.add_argument("-imds_timeout", "--imds_timeout", type=positive_float, default=DEFAULT_IMDS_TIMEOUT,
                        help=f"seconds to wait for each metadata request (default: {DEFAULT_IMDS_TIMEOUT})")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging to stderr")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def load_settings(environ: Mapping[str, str], argv: Optional[Sequence[str]] = None) -> Settings:
    """Merge an environment snapshot with parsed flags; flags win when given."""
    ns = parse_args(argv)
    values = {}
    for dest, env_name in ENV_DEFAULTS.items():
        flag_value = getattr(ns, dest)
        values[dest] = flag_value if flag_value is not None else environ.get(env_name, "")
    return Settings(
        pair_delim=ns.pair_delim,
        kv_delim=ns.kv_delim,
        query_meta=ns.query_meta,
        imds_timeout=ns.imds_timeout,
        verbose=ns.verbose,
        **values,
    )
