#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""EC2 Describe Tags
=================================

Prints the tags of one EC2 instance, one line per instance, as
``key<kv_delim>value`` pairs joined by ``<p_delim>``.

Region and instance id come from flags, environment variables, or (with
``-query_meta``) the instance metadata service (IMDSv2).

Examples::

    ec2-describe-tags -query_meta
    ec2-describe-tags -region eu-west-1 -instance_id i-0abc -p_delim , -kv_delim :

Exit status is 0 when tags were printed and 1 on any metadata or API failure,
or when no instance matched.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from ec2_describe_tags.common.aws_common import (
    describe_instance_tags,
    iter_instance_lines,
    select_credentials,
    session_for_credentials,
)
from ec2_describe_tags.common.config import load_settings
from ec2_describe_tags.common.imds import IMDSError, resolve_from_metadata

LOGGER = logging.getLogger(__name__)


def main(args: Optional[Sequence[str]] = None) -> int:
    settings = load_settings(os.environ, args)

    logging.basicConfig(
        level=logging.DEBUG if settings.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = resolve_from_metadata(settings)
    except IMDSError as exc:
        print(f"Error: {exc}")
        return 1

    source = select_credentials(settings)
    try:
        session = session_for_credentials(source, settings.region)
        reservations = describe_instance_tags(session, settings.instance_id)
    except (ClientError, BotoCoreError) as exc:
        print(f"Error: {exc}")
        return 1

    if not reservations:
        print(f"Error: no instance found with id {settings.instance_id!r}", file=sys.stderr)
        return 1

    for line in iter_instance_lines(reservations, settings.pair_delim, settings.kv_delim):
        print(line)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
