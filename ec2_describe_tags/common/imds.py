#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Minimal IMDSv2 client.

A session token is requested with PUT, then each metadata path is read with
GET using that token. Bodies are returned as-is (no stripping).
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional

import requests

from ec2_describe_tags.common.config import DEFAULT_IMDS_TIMEOUT, Settings

LOGGER = logging.getLogger(__name__)

IMDS_BASE = "http://169.254.169.254"
TOKEN_PATH = "latest/api/token"
REGION_PATH = "latest/meta-data/placement/region"
INSTANCE_ID_PATH = "latest/meta-data/instance-id"

TOKEN_TTL_HEADER = "X-aws-ec2-metadata-token-ttl-seconds"
TOKEN_HEADER = "X-aws-ec2-metadata-token"
TOKEN_TTL = 30  # seconds


class IMDSError(RuntimeError):
    """Raised when the metadata service cannot be reached or answers with an error."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


def _url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _read_body(method: str, url: str, headers: dict, timeout: float) -> str:
    try:
        with requests.request(method, url, headers=headers, timeout=timeout) as resp:
            resp.raise_for_status()
            return resp.content.decode("utf-8")
    except requests.RequestException as exc:
        raise IMDSError(f"{method} {url}: {exc}", exc) from exc


def get_token(ttl: int = TOKEN_TTL, timeout: float = DEFAULT_IMDS_TIMEOUT, base_url: str = IMDS_BASE) -> str:
    """Obtain an IMDSv2 session token valid for ``ttl`` seconds."""
    url = _url(base_url, TOKEN_PATH)
    LOGGER.debug("requesting IMDSv2 token (ttl=%ss)", ttl)
    return _read_body("PUT", url, {TOKEN_TTL_HEADER: str(ttl)}, timeout)


def get_metadata(token: str, path: str, timeout: float = DEFAULT_IMDS_TIMEOUT, base_url: str = IMDS_BASE) -> str:
    url = _url(base_url, path)
    LOGGER.debug("GET %s", url)
    return _read_body("GET", url, {TOKEN_HEADER: token}, timeout)


def resolve_from_metadata(settings: Settings, base_url: str = IMDS_BASE) -> Settings:
    """
    Fill in region and/or instance id from IMDS when ``query_meta`` is on.

    Fields already set are left untouched. When nothing is missing the
    metadata service is not contacted at all.
    """
    if not settings.query_meta:
        return settings
    if settings.region and settings.instance_id:
        LOGGER.debug("region and instance id already set; skipping metadata lookup")
        return settings

    try:
        token = get_token(timeout=settings.imds_timeout, base_url=base_url)
    except IMDSError as exc:
        raise IMDSError(f"Failed to get IMDSv2 token: {exc}", exc.cause) from exc

    changes = {}
    if not settings.region:
        changes["region"] = get_metadata(token, REGION_PATH, timeout=settings.imds_timeout, base_url=base_url)
        LOGGER.debug("region from metadata: %s", changes["region"])
    if not settings.instance_id:
        changes["instance_id"] = get_metadata(token, INSTANCE_ID_PATH, timeout=settings.imds_timeout, base_url=base_url)
        LOGGER.debug("instance id from metadata: %s", changes["instance_id"])
    return dataclasses.replace(settings, **changes)
