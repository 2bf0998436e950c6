# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/nodes/constants.py

CB_PACKAGE = "couchbase-server"
CB_INSTALL_DIRECTORY = "/opt/couchbase"
CB_OWNER = "couchbase:couchbase"

# Where install archives are staged before installation
PACKAGE_STAGING_DIRECTORY = "/home/ec2-user"

# Benchmark hosts are disposable, so node-init always uses these credentials
ADMIN_ENDPOINT = "localhost:8091"
DEFAULT_ADMIN_USERNAME = "Administrator"
DEFAULT_ADMIN_PASSWORD = "asdasd"

SCRATCH_MOUNT_POINT = "/mnt"
SCRATCH_FILESYSTEM = "xfs"

ROOT_AUTHORIZED_KEYS = "/root/.ssh/authorized_keys"
ROOT_KEY_PREFIX = "ssh-rsa"
