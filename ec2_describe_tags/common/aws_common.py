#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Union

import boto3
from botocore.config import Config as BotoConfig

from ec2_describe_tags.common.config import Settings

LOGGER = logging.getLogger(__name__)

CFG = BotoConfig(
    retries={"max_attempts": 3, "mode": "standard"},
    connect_timeout=5,
    read_timeout=30,
)


@dataclass(frozen=True)
class StaticCredentials:
    access_key: str
    secret_access_key: str
    session_token: str = ""

    def __repr__(self) -> str:
        return f"StaticCredentials(access_key={self.access_key!r}, secret_access_key='***')"


@dataclass(frozen=True)
class NamedProfile:
    name: str


@dataclass(frozen=True)
class DefaultProviderChain:
    pass


CredentialSource = Union[StaticCredentials, NamedProfile, DefaultProviderChain]


def select_credentials(settings: Settings) -> CredentialSource:
    """
    Static keys win only when both halves are present; otherwise a named
    profile if one is set, else whatever boto3 finds on its own (env, shared
    config, instance role).
    """
    if settings.access_key and settings.secret_access_key:
        return StaticCredentials(settings.access_key, settings.secret_access_key, settings.session_token)
    if settings.access_key or settings.secret_access_key:
        LOGGER.warning("only one of access key / secret access key given; ignoring static credentials")
    if settings.profile:
        return NamedProfile(settings.profile)
    return DefaultProviderChain()


def session_for_credentials(source: CredentialSource, region: str) -> boto3.session.Session:
    region_name: Optional[str] = region or None
    LOGGER.debug("creating session (%r, region=%s)", source, region_name)
    if isinstance(source, StaticCredentials):
        return boto3.Session(
            aws_access_key_id=source.access_key,
            aws_secret_access_key=source.secret_access_key,
            aws_session_token=source.session_token or None,
            region_name=region_name,
        )
    if isinstance(source, NamedProfile):
        return boto3.Session(profile_name=source.name, region_name=region_name)
    return boto3.Session(region_name=region_name)


def describe_instance_tags(session: boto3.session.Session, instance_id: str) -> List[Dict]:
    """
    Single DescribeInstances call filtered on exact instance id.
    Returns the Reservations list (empty when nothing matches).
    """
    ec2 = session.client("ec2", config=CFG)
    LOGGER.debug("describe_instances instance-id=%s", instance_id)
    resp = ec2.describe_instances(Filters=[{"Name": "instance-id", "Values": [instance_id]}])
    return resp.get("Reservations", []) or []


def format_tags(tags: List[Dict[str, str]], pair_delim: str = "\n", kv_delim: str = "=") -> str:
    # API order is kept, no sorting
    return pair_delim.join(f"{t.get('Key', '')}{kv_delim}{t.get('Value', '')}" for t in tags or [])


def iter_instance_lines(reservations: List[Dict], pair_delim: str = "\n", kv_delim: str = "=") -> Iterator[str]:
    for res in reservations:
        for inst in res.get("Instances", []) or []:
            yield format_tags(inst.get("Tags", []), pair_delim, kv_delim)
